from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """
    Custom manager to easily create different types of college users.
    """

    def create_user(self, email, password=None, **extra_fields):
        """Base method for creating a generic user."""
        if not email:
            raise ValueError(_('The Email must be set'))
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create a Superuser."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)

    # --- ROLE SPECIFIC HELPERS ---

    def create_school_admin(self, email, password=None, **extra_fields):
        """Create a school administrator. Admins manage records through the admin site."""
        extra_fields.setdefault('is_school_admin', True)
        extra_fields.setdefault('is_staff', True)
        return self.create_user(email, password, **extra_fields)

    def create_lecturer(self, email, password=None, **extra_fields):
        """Create a Lecturer."""
        extra_fields.setdefault('is_lecturer', True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    username = None
    email = models.EmailField(_('email address'), unique=True)

    # Roles / Flags
    is_school_admin = models.BooleanField(default=False)
    is_lecturer = models.BooleanField(default=False)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def role_label(self):
        """Helper to get a string representation of the user's role"""
        if self.is_superuser: return "Super Admin"
        if self.is_school_admin: return "School Admin"
        if self.is_lecturer: return "Lecturer"
        return "User"
