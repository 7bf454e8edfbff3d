from django.db import models


class SessionScopedQuerySet(models.QuerySet):
    def for_session(self, session):
        return self.filter(session=session)


class SessionScopedManager(models.Manager):
    def get_queryset(self):
        return SessionScopedQuerySet(self.model, using=self._db)

    def for_session(self, session):
        return self.get_queryset().for_session(session)
