import pytest

from partner_bot.wizard import DocumentSlot, ErrorKind, Step

from factories import EMAIL, pdf


@pytest.fixture
async def ready_session(review_session):
    review_session.set_field("termsAccepted", True)
    review_session.set_field("dataConsent", True)
    return review_session


async def test_uploads_then_posts_with_paths(ready_session, api):
    coordinator = ready_session.coordinator

    outcome = await coordinator.submit()

    assert outcome.success
    assert outcome.message == "Application submitted successfully."
    assert [name for name, _ in api.calls[-2:]] == [
        "upload_agent_documents",
        "submit_partner_application",
    ]

    upload = api.calls_to("upload_agent_documents")[0]
    assert upload["first_name"] == "John"
    assert upload["temp_agent_id"] == coordinator.temp_agent_id
    assert set(upload["files"]) == {"idProof", "companyLicence", "agentPhoto", "companyPhoto"}

    payload = api.calls_to("submit_partner_application")[0]["payload"]
    assert payload["documents"] == dict(outcome.document_paths)
    assert payload["documents"]["idProof"].endswith("/idProof")
    assert payload["email"] == EMAIL
    assert payload["servicesOffered"] == ["Admission Counseling", "Visa Processing"]
    assert payload["os"] == "Linux"
    assert payload["browser"] == "Firefox"


async def test_without_documents_skips_upload(ready_session, api):
    for slot in list(ready_session.store.filled_slots()):
        ready_session.assign_document(slot, None)

    outcome = await ready_session.coordinator.submit()

    assert outcome.success
    assert api.calls_to("upload_agent_documents") == []
    payload = api.calls_to("submit_partner_application")[0]["payload"]
    assert payload["documents"] == {}


async def test_failed_upload_never_posts_record(ready_session, api):
    api.fail("upload_agent_documents", "Error uploading documents")

    outcome = await ready_session.coordinator.submit()

    assert not outcome.success
    assert outcome.kind is ErrorKind.UPLOAD
    assert outcome.message == "Error uploading documents"
    assert api.calls_to("submit_partner_application") == []
    assert ready_session.current_step is Step.REVIEW
    assert ready_session.store.get("companyName") == "Doe Education Pvt Ltd"


async def test_upload_missing_a_slot_fails(ready_session, api):
    api.drop_paths.add("agentPhoto")

    outcome = await ready_session.coordinator.submit()

    assert not outcome.success
    assert outcome.kind is ErrorKind.UPLOAD
    assert api.calls_to("submit_partner_application") == []


async def test_failed_post_keeps_state_and_retry_reuses_upload(ready_session, api):
    api.fail("submit_partner_application", "Email already registered", 400)

    outcome = await ready_session.coordinator.submit()

    assert not outcome.success
    assert outcome.kind is ErrorKind.SUBMISSION
    assert outcome.message == "Email already registered"
    assert ready_session.current_step is Step.REVIEW
    assert ready_session.challenge.is_verified
    assert len(ready_session.store.filled_slots()) == 4

    api.succeed("submit_partner_application")
    outcome = await ready_session.coordinator.submit()

    assert outcome.success
    assert len(api.calls_to("upload_agent_documents")) == 1
    assert len(api.calls_to("submit_partner_application")) == 2


async def test_changed_document_forces_new_upload(ready_session, api):
    api.fail("submit_partner_application")
    await ready_session.coordinator.submit()

    ready_session.assign_document(DocumentSlot.RESUME, pdf(name="cv.pdf"))
    api.succeed("submit_partner_application")
    outcome = await ready_session.coordinator.submit()

    assert outcome.success
    uploads = api.calls_to("upload_agent_documents")
    assert len(uploads) == 2
    assert "resume" in uploads[1]["files"]
    assert "resume" in outcome.document_paths


async def test_not_on_review_step(verified_session, api):
    outcome = await verified_session.coordinator.submit()

    assert not outcome.success
    assert outcome.kind is ErrorKind.VALIDATION
    assert api.calls_to("upload_agent_documents") == []


async def test_missing_consent_reports_field_errors(review_session, api):
    review_session.set_field("termsAccepted", True)

    outcome = await review_session.coordinator.submit()

    assert not outcome.success
    assert outcome.kind is ErrorKind.VALIDATION
    assert set(outcome.field_errors) == {"dataConsent"}
    assert api.calls_to("upload_agent_documents") == []


async def test_unverified_email_blocks_submit(ready_session, api):
    ready_session.challenge.reset()

    outcome = await ready_session.coordinator.submit()

    assert not outcome.success
    assert outcome.kind is ErrorKind.VERIFICATION
    assert api.calls_to("upload_agent_documents") == []


async def test_second_submit_while_in_flight_is_rejected(ready_session, api):
    coordinator = ready_session.coordinator
    original_upload = api.upload_agent_documents
    nested = {}

    async def upload_and_resubmit(*args):
        nested["outcome"] = await coordinator.submit()
        return await original_upload(*args)

    api.upload_agent_documents = upload_and_resubmit

    outcome = await coordinator.submit()

    assert outcome.success
    assert not nested["outcome"].success
    assert len(api.calls_to("submit_partner_application")) == 1
    assert not coordinator.in_flight


def test_temp_agent_id_changes_on_reset(session):
    coordinator = session.coordinator
    first = coordinator.temp_agent_id

    coordinator.reset()

    assert first.startswith("temp_")
    assert coordinator.temp_agent_id != first
