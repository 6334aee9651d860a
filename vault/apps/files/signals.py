"""Signal handlers for files app."""

import logging

from django.conf import settings
from django.contrib.auth.base_user import AbstractBaseUser
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from vault.apps.files.logic.trash_operations import purge_owner_files

logger = logging.getLogger(__name__)


@receiver(pre_delete, sender=settings.AUTH_USER_MODEL)
def purge_files_of_deleted_user(
    sender: type[AbstractBaseUser],
    instance: AbstractBaseUser,
    **kwargs: object,
) -> None:
    """Purge a user's files before the user row is deleted.

    Runs before the owner FK cascade removes the file rows, so each blob
    goes together with its row.

    Args:
        sender: The user model class.
        instance: The user being deleted.
        **kwargs: Additional signal arguments.
    """
    logger.info('Purging files of deleted user %d', instance.pk)
    purge_owner_files(instance.pk)
