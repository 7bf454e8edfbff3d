from django.dispatch import Signal


# Sent with sender=SchoolProfile and profile=<SchoolProfile> after any profile or session mutation.
profile_changed = Signal()


def notify_profile_changed(profile):
    profile_changed.send(sender=profile.__class__, profile=profile)
