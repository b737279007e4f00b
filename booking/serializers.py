"""
Plain dict serialization of booking models for JSON responses
"""


def _datetime(value):
    return value.isoformat() if value else None


def _money(value):
    return float(value) if value is not None else None


def serialize_coupon(coupon):
    return {
        'id': coupon.id,
        'code': coupon.code,
        'auto_generate_code': coupon.auto_generate_code,
        'code_prefix': coupon.code_prefix,
        'description': coupon.description,
        'discount_type': coupon.discount_type,
        'discount_value': _money(coupon.discount_value),
        'valid_from': _datetime(coupon.valid_from),
        'valid_until': _datetime(coupon.valid_until),
        'max_uses': coupon.max_uses,
        'uses_per_user': coupon.uses_per_user,
        'min_purchase_amount': _money(coupon.min_purchase_amount),
        'current_total_uses': coupon.current_total_uses,
        'remaining_uses': coupon.remaining_uses,
        'applicable_sports': [sport.id for sport in coupon.applicable_sports.all()],
        'applicable_courses': [course.id for course in coupon.applicable_courses.all()],
        'applicable_camps': [camp.id for camp in coupon.applicable_camps.all()],
        'is_active': coupon.is_active,
        'created_at': _datetime(coupon.created_at),
    }


def serialize_participant(participant):
    return {
        'id': participant.id,
        'first_name': participant.first_name,
        'last_name': participant.last_name,
        'date_of_birth': participant.date_of_birth.isoformat() if participant.date_of_birth else None,
        'gender': participant.gender,
        'skill_level': participant.skill_level,
        'medical_notes': participant.medical_notes,
        'allergies': participant.allergies,
        'emergency_contact_name': participant.emergency_contact_name,
        'emergency_contact_phone': participant.emergency_contact_phone,
    }


def serialize_booking_addon(addon):
    return {
        'group_name': addon.group_name,
        'option_name': addon.option_name,
        'price_adjustment': _money(addon.price_adjustment),
        'quantity': addon.quantity,
        'total_price': _money(addon.total_price),
    }


def serialize_payment(payment):
    return {
        'id': payment.id,
        'amount': _money(payment.amount),
        'currency': payment.currency,
        'payment_intent_id': payment.payment_intent_id,
        'status': payment.status,
        'refund_id': payment.refund_id,
        'created_at': _datetime(payment.created_at),
        'paid_at': _datetime(payment.paid_at),
    }


def serialize_history(entry):
    return {
        'action': entry.action,
        'user': entry.user.username if entry.user else None,
        'changes': entry.changes,
        'comment': entry.comment,
        'created_at': _datetime(entry.created_at),
    }


def serialize_booking(booking, detail=False):
    """
    Booking summary for lists; `detail` adds participants, add-ons, payments and history.
    The access token is never included, it is only handed out at initiation.
    """
    data = {
        'id': booking.id,
        'camp_id': booking.camp_id,
        'camp_title': booking.camp.title,
        'session_id': booking.session_id,
        'session_name': booking.session.session_name,
        'session_start_date': booking.session.start_date.isoformat(),
        'session_end_date': booking.session.end_date.isoformat(),
        'guest_name': booking.guest_name,
        'guest_email': booking.guest_email,
        'guest_phone': booking.guest_phone,
        'original_amount': _money(booking.original_amount),
        'discount_amount': _money(booking.discount_amount),
        'final_amount': _money(booking.final_amount),
        'coupon_code': booking.coupon.code if booking.coupon else None,
        'status': booking.status,
        'status_display': booking.get_status_display(),
        'payment_status': booking.payment_status,
        'payment_status_display': booking.get_payment_status_display(),
        'payment_method': booking.payment_method,
        'participant_count': booking.participant_count,
        'created_at': _datetime(booking.created_at),
        'confirmed_at': _datetime(booking.confirmed_at),
    }
    if detail:
        data.update({
            'notes': booking.notes,
            'participants': [serialize_participant(p) for p in booking.participants.all()],
            'addons': [serialize_booking_addon(a) for a in booking.addons.all()],
            'payments': [serialize_payment(p) for p in booking.payments.all()],
            'history': [serialize_history(h) for h in booking.history.select_related('user')],
        })
    return data


def serialize_public_booking(booking):
    """What the checkout page may see through the access token"""
    data = serialize_booking(booking)
    data.update({
        'participants': [
            {'first_name': p.first_name, 'last_name': p.last_name} for p in booking.participants.all()
        ],
        'addons': [serialize_booking_addon(a) for a in booking.addons.all()],
        'is_payable': booking.is_payable,
    })
    return data
