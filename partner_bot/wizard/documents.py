"""
Client-side staging of supporting documents.
"""
from typing import Optional

from partner_bot.wizard.errors import DocumentValidationError
from partner_bot.wizard.fields import DocumentSlot, FieldStore, FileRef, as_slot
from partner_bot.logger import get_logger

logger = get_logger(__name__)

MiB = 1024 * 1024

PHOTO_MEDIA_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png"})
PHOTO_MAX_SIZE = 2 * MiB

DOCUMENT_MEDIA_TYPES = frozenset({"application/pdf"})
DOCUMENT_MAX_SIZE = 5 * MiB


def slot_policy(slot: DocumentSlot):
    """Return (allowed media types, allowed label, max size in bytes) for a slot."""
    if slot.is_photo:
        return PHOTO_MEDIA_TYPES, "JPG, JPEG, PNG", PHOTO_MAX_SIZE
    return DOCUMENT_MEDIA_TYPES, "PDF", DOCUMENT_MAX_SIZE


def validate_file(slot: DocumentSlot, file_ref: FileRef) -> None:
    """Raise DocumentValidationError if the file breaks the slot's policy."""
    allowed, allowed_label, max_size = slot_policy(slot)

    if (file_ref.media_type or "").lower() not in allowed:
        raise DocumentValidationError(
            slot.value,
            "type",
            f"Invalid file type for {slot.label}. Only {allowed_label} files allowed.",
        )

    if file_ref.size > max_size:
        raise DocumentValidationError(
            slot.value,
            "size",
            f"File size exceeds {max_size // MiB}MB limit for {slot.label}",
        )


class DocumentStagingUploader:
    """
    Validates files and stores them in FieldStore document slots.

    An invalid file is never stored, so the documents step only has to check
    that required slots are filled. `revision` increases on every accepted
    change and lets the submission pipeline tell whether a previous upload
    still matches what is staged.
    """

    def __init__(self, store: FieldStore):
        self.store = store
        self.revision = 0

    def assign(self, slot, file_ref: Optional[FileRef]) -> None:
        try:
            slot = as_slot(slot)
        except ValueError:
            raise DocumentValidationError(str(slot), "slot", f"Unknown document slot: {slot}") from None

        if file_ref is None or not file_ref.name:
            self.clear(slot)
            return

        try:
            validate_file(slot, file_ref)
        except DocumentValidationError as e:
            logger.warning(
                "Rejected staged document",
                slot=slot.value,
                constraint=e.constraint,
                media_type=file_ref.media_type,
                size=file_ref.size,
            )
            raise

        self.store.set_document(slot, file_ref)
        self.revision += 1
        logger.info(
            "Document staged",
            slot=slot.value,
            file_name=file_ref.name,
            size=file_ref.size,
        )

    def clear(self, slot) -> None:
        slot = as_slot(slot)
        if self.store.document(slot) is None:
            return
        self.store.set_document(slot, None)
        self.revision += 1
        logger.info("Document cleared", slot=slot.value)

    def missing_required(self):
        """Required slots that are still empty."""
        return [slot for slot in DocumentSlot if slot.required and self.store.document(slot) is None]
