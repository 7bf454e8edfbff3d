import logging

from django.db import transaction

from apps.core.schools.models import SchoolProfile
from apps.core.schools.signals import notify_profile_changed

logger = logging.getLogger(__name__)


PROFILE_FIELDS = (
    'name',
    'tagline',
    'address',
    'website',
    'phone',
    'logo',
    'background_image',
    'affiliation',
    'institution_type',
    'fees_receipt_terms',
    'slider_images',
)


def get_school_profile():
    return SchoolProfile.load()


@transaction.atomic
def update_school_profile(profile=None, **fields):
    """Apply identity/configuration fields to the profile and notify subscribers.

    The current session pointer is not touched here; it moves only through
    the session services so it always names an existing session.
    """
    profile = profile or SchoolProfile.load()

    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise TypeError(f"Unknown school profile fields: {', '.join(sorted(unknown))}")

    for field_name, value in fields.items():
        setattr(profile, field_name, value)
    profile.save()

    logger.info('School profile updated: %s', ', '.join(sorted(fields)) or 'no fields')
    notify_profile_changed(profile)
    return profile
