from django import forms

from .constants import DISCOUNT_PERCENTAGE, MAX_PARTICIPANTS_PER_BOOKING
from .models import Coupon, Participant, normalize_coupon_code


class ParticipantForm(forms.ModelForm):
    """One participant of a camp booking"""

    class Meta:
        model = Participant
        fields = [
            'first_name', 'last_name', 'date_of_birth', 'gender', 'skill_level',
            'medical_notes', 'allergies', 'emergency_contact_name', 'emergency_contact_phone',
        ]

    def clean_first_name(self):
        first_name = (self.cleaned_data.get('first_name') or '').strip()
        if not first_name:
            raise forms.ValidationError('First name is required')
        return first_name


class BookingContactForm(forms.Form):
    """Contact details and session choice of the public booking form"""
    guest_name = forms.CharField(max_length=200)
    guest_email = forms.EmailField()
    guest_phone = forms.CharField(max_length=30)
    camp_id = forms.IntegerField()
    session_id = forms.IntegerField()
    coupon_code = forms.CharField(max_length=50, required=False)
    notes = forms.CharField(required=False)

    def clean_guest_name(self):
        return self.cleaned_data['guest_name'].strip()

    def clean_guest_phone(self):
        phone = self.cleaned_data['guest_phone'].strip()
        digits = ''.join(ch for ch in phone if ch.isdigit())
        if len(digits) < 7:
            raise forms.ValidationError('Enter a valid phone number')
        return phone

    def clean_coupon_code(self):
        return normalize_coupon_code(self.cleaned_data.get('coupon_code'))


def validate_participants(raw_participants):
    """
    Validate the list of participant dicts

    Returns:
        (participant_forms, errors) - errors is a list with one dict per invalid participant
    """
    if not isinstance(raw_participants, list) or not raw_participants:
        return [], [{'participants': ['At least one participant is required']}]

    if len(raw_participants) > MAX_PARTICIPANTS_PER_BOOKING:
        return [], [{'participants': [f'No more than {MAX_PARTICIPANTS_PER_BOOKING} participants per booking']}]

    participant_forms = []
    errors = []
    for index, raw in enumerate(raw_participants):
        form = ParticipantForm(raw if isinstance(raw, dict) else {})
        if not form.is_valid():
            errors.append({'index': index, **{k: [str(e) for e in v] for k, v in form.errors.items()}})
        participant_forms.append(form)

    return participant_forms, errors


class CouponForm(forms.ModelForm):
    code = forms.CharField(max_length=50, required=False)

    class Meta:
        model = Coupon
        fields = [
            'code', 'auto_generate_code', 'code_prefix', 'description', 'discount_type', 'discount_value',
            'valid_from', 'valid_until', 'max_uses', 'uses_per_user', 'min_purchase_amount',
            'applicable_sports', 'applicable_courses', 'applicable_camps', 'is_active',
        ]

    def clean_code(self):
        return normalize_coupon_code(self.cleaned_data.get('code'))

    def clean_code_prefix(self):
        return normalize_coupon_code(self.cleaned_data.get('code_prefix'))

    def clean(self):
        from .services import CouponService

        cleaned_data = super().clean()

        discount_type = cleaned_data.get('discount_type')
        discount_value = cleaned_data.get('discount_value')
        if discount_value is not None:
            if discount_value <= 0:
                self.add_error('discount_value', 'Discount must be greater than 0')
            elif discount_type == DISCOUNT_PERCENTAGE and discount_value > 100:
                self.add_error('discount_value', 'Percentage discount cannot exceed 100')

        valid_from = cleaned_data.get('valid_from')
        valid_until = cleaned_data.get('valid_until')
        if valid_from and valid_until and valid_until <= valid_from:
            self.add_error('valid_until', 'End of validity must be after its start')

        min_purchase = cleaned_data.get('min_purchase_amount')
        if min_purchase is not None and min_purchase < 0:
            self.add_error('min_purchase_amount', 'Minimum purchase cannot be negative')

        if not cleaned_data.get('code'):
            if cleaned_data.get('auto_generate_code'):
                try:
                    cleaned_data['code'] = CouponService.generate_code(cleaned_data.get('code_prefix', ''))
                except forms.ValidationError as e:
                    self.add_error('code', e)
            else:
                self.add_error('code', 'Enter a coupon code or enable auto-generation')

        return cleaned_data
