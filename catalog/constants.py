"""
Constants for the catalog app
"""

# Camp publication status
CAMP_STATUS_CHOICES = [
    ('DRAFT', 'Draft'),
    ('PUBLISHED', 'Published'),
    ('ARCHIVED', 'Archived'),
]

# Camp session status
SESSION_STATUS_CHOICES = [
    ('OPEN', 'Open'),
    ('CLOSED', 'Closed'),
    ('FULL', 'Full'),
]

# Add-on group selection type
SELECTION_SINGLE = 'SINGLE'
SELECTION_MULTIPLE = 'MULTIPLE'
SELECTION_TYPE_CHOICES = [
    (SELECTION_SINGLE, 'Single choice'),
    (SELECTION_MULTIPLE, 'Multiple choice'),
]

# Booking rules
RULE_TYPE_CHOICES = [
    ('OPEN', 'Open'),
    ('CLOSE', 'Close'),
]
DAYS_OF_WEEK = ['MONDAY', 'TUESDAY', 'WEDNESDAY', 'THURSDAY', 'FRIDAY', 'SATURDAY', 'SUNDAY']

# Media
MEDIA_TYPE_CHOICES = [
    ('IMAGE', 'Image'),
    ('VIDEO', 'Video'),
]
IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.gif', '.webp']
VIDEO_EXTENSIONS = ['.mp4', '.webm', '.mov']
MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
MAX_VIDEO_SIZE = 50 * 1024 * 1024  # 50MB
THUMBNAIL_SIZE = (400, 400)

# Daily availability
DEFAULT_MAX_SLOTS = 10
AVAILABILITY_OPEN = 'open'
AVAILABILITY_FULL = 'full'
AVAILABILITY_CLOSED = 'closed'
AVAILABILITY_NONE = 'none'

# Admin list pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
