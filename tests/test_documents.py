import pytest

from partner_bot.wizard.documents import DocumentStagingUploader, MiB
from partner_bot.wizard.errors import DocumentValidationError
from partner_bot.wizard.fields import DocumentSlot, FieldStore

from factories import jpeg, pdf, png


@pytest.fixture
def store():
    return FieldStore()


@pytest.fixture
def uploader(store):
    return DocumentStagingUploader(store)


def test_pdf_under_limit_is_staged(uploader, store):
    file_ref = pdf(size=1 * MiB)

    uploader.assign("idProof", file_ref)

    assert store.document(DocumentSlot.ID_PROOF) == file_ref


def test_png_into_pdf_slot_is_a_type_violation(uploader, store):
    with pytest.raises(DocumentValidationError) as exc_info:
        uploader.assign("idProof", png())

    assert exc_info.value.slot == "idProof"
    assert exc_info.value.constraint == "type"
    assert "ID Proof" in exc_info.value.message
    assert "PDF" in exc_info.value.message
    assert store.document(DocumentSlot.ID_PROOF) is None


def test_oversized_photo_keeps_previous_file(uploader, store):
    previous = jpeg(size=1 * MiB, name="old.jpg")
    uploader.assign(DocumentSlot.AGENT_PHOTO, previous)

    with pytest.raises(DocumentValidationError) as exc_info:
        uploader.assign(DocumentSlot.AGENT_PHOTO, jpeg(size=3 * MiB, name="new.jpg"))

    assert exc_info.value.constraint == "size"
    assert "2MB" in exc_info.value.message
    assert "Agent Photo" in exc_info.value.message
    assert store.document(DocumentSlot.AGENT_PHOTO) == previous


def test_photo_slots_accept_png_and_reject_pdf(uploader):
    uploader.assign(DocumentSlot.COMPANY_PHOTO, png())

    with pytest.raises(DocumentValidationError):
        uploader.assign(DocumentSlot.COMPANY_PHOTO, pdf())


def test_pdf_limit_is_five_mib(uploader):
    uploader.assign(DocumentSlot.RESUME, pdf(size=5 * MiB))

    with pytest.raises(DocumentValidationError) as exc_info:
        uploader.assign(DocumentSlot.RESUME, pdf(size=5 * MiB + 1))

    assert "5MB" in exc_info.value.message


def test_none_clears_without_validation(uploader, store):
    uploader.assign(DocumentSlot.COMPANY_LICENCE, pdf())

    uploader.assign(DocumentSlot.COMPANY_LICENCE, None)

    assert store.document(DocumentSlot.COMPANY_LICENCE) is None


def test_unknown_slot_is_rejected(uploader):
    with pytest.raises(DocumentValidationError) as exc_info:
        uploader.assign("passport", pdf())

    assert exc_info.value.constraint == "slot"


def test_revision_moves_only_on_accepted_changes(uploader):
    assert uploader.revision == 0

    uploader.assign(DocumentSlot.ID_PROOF, pdf())
    assert uploader.revision == 1

    with pytest.raises(DocumentValidationError):
        uploader.assign(DocumentSlot.ID_PROOF, png())
    assert uploader.revision == 1

    uploader.clear(DocumentSlot.RESUME)
    assert uploader.revision == 1

    uploader.clear(DocumentSlot.ID_PROOF)
    assert uploader.revision == 2


def test_missing_required(uploader):
    uploader.assign(DocumentSlot.ID_PROOF, pdf())
    uploader.assign(DocumentSlot.RESUME, pdf())

    assert uploader.missing_required() == [
        DocumentSlot.COMPANY_LICENCE,
        DocumentSlot.AGENT_PHOTO,
        DocumentSlot.COMPANY_PHOTO,
    ]
