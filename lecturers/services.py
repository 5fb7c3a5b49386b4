import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction

from .models import Lecturer

logger = logging.getLogger(__name__)


def create_lecturer_account(full_name, email, password, **profile):
    """
    Create a login account with the lecturer role and its Lecturer profile.

    Both rows are created in one transaction.

    Raises:
        ValidationError: if the name is too short or the email is taken
    """
    User = get_user_model()
    full_name = (full_name or '').strip()
    email = (email or '').strip()

    if len(full_name) < 2:
        raise ValidationError('Full name must be at least 2 characters')
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError(f'An account with email {email} already exists')

    with transaction.atomic():
        user = User.objects.create_lecturer(
            email=email,
            password=password,
            first_name=full_name.split()[0],
            last_name=' '.join(full_name.split()[1:]),
        )
        lecturer = Lecturer.objects.create(
            user=user,
            full_name=full_name,
            email=user.email,
            **profile
        )

    logger.info(f"Lecturer account created for {user.email} (lecturer {lecturer.pk})")
    return lecturer
