from django.db import models
from django.utils.translation import gettext_lazy as _


class Gender(models.TextChoices):
    MALE = 'Male', _('Male')
    FEMALE = 'Female', _('Female')


class TermLabel(models.TextChoices):
    FIRST = 'First', _('First')
    SECOND = 'Second', _('Second')
    THIRD = 'Third', _('Third')


class PromotionStatus(models.TextChoices):
    PENDING = 'pending', _('Pending')
    PROMOTED = 'promoted', _('Promoted')
    REPEATED = 'repeated', _('Repeated')


class Conduct(models.TextChoices):
    EXCELLENT = 'Excellent', _('Excellent')
    GOOD = 'Good', _('Good')
    FAIR = 'Fair', _('Fair')
    POOR = 'Poor', _('Poor')
