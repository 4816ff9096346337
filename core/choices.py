from django.db import models
from django.utils.translation import gettext_lazy as _


class Gender(models.TextChoices):
    MALE = 'M', _('Male')
    FEMALE = 'F', _('Female')


class PersonTitle(models.TextChoices):
    MR = 'MR', _('Mr.')
    MRS = 'MRS', _('Mrs.')
    MS = 'MS', _('Ms.')
    DR = 'DR', _('Dr.')
    REV = 'REV', _('Rev.')
    PROF = 'PROF', _('Prof.')


class RelationshipType(models.TextChoices):
    FATHER = 'FATHER', _('Father')
    MOTHER = 'MOTHER', _('Mother')
    UNCLE = 'UNCLE', _('Uncle')
    AUNT = 'AUNT', _('Aunt')
    BROTHER = 'BROTHER', _('Brother')
    SISTER = 'SISTER', _('Sister')
    GRANDPARENT = 'GRANDPARENT', _('Grandparent')
    GUARDIAN = 'GUARDIAN', _('Legal Guardian')
