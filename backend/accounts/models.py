from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """Extended user model carrying the profile fields the ride engine reads"""

    # Contact & institution
    phone_number = models.CharField(max_length=15, blank=True)
    university = models.CharField(max_length=120, null=True, blank=True)

    # Privacy preferences
    show_university = models.BooleanField(default=False)
    show_phone = models.BooleanField(default=False)

    class Meta:
        db_table = 'users'

    def __str__(self):
        return self.username
