from django.db import models


class AcademicSessionManager(models.Manager):
    def get_by_natural_key(self, name):
        return self.get(name=name)


class AcademicSession(models.Model):
    # Labels sort reverse-chronologically by plain string comparison, e.g. 2024-2025 first.
    name = models.CharField(max_length=40, unique=True)  # e.g. 2024-2025
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AcademicSessionManager()

    class Meta:
        ordering = ['-name']

    def __str__(self):
        return self.name

    def natural_key(self):
        return (self.name,)
