"""Test doubles and sample data shared by the test modules."""
from partner_bot.wizard import DocumentSlot, FileRef
from partner_bot.wizard.errors import ApiError

YEAR = 2026
VALID_OTP = "123456"
EMAIL = "john@example.com"


class FakeInquiryApi:
    """In-memory stand-in for InquiryApiClient that records every call."""

    def __init__(self):
        self.calls = []
        self.failures = {}
        self.valid_otp = VALID_OTP
        self.drop_paths = set()

    def fail(self, method, message="Backend error", status=500):
        self.failures[method] = (message, status)

    def succeed(self, method):
        self.failures.pop(method, None)

    def calls_to(self, method):
        return [args for name, args in self.calls if name == method]

    def _record(self, method, **args):
        self.calls.append((method, args))
        if method in self.failures:
            message, status = self.failures[method]
            raise ApiError(message, status=status)

    async def send_otp(self, email):
        self._record("send_otp", email=email)
        return {"success": True, "message": "OTP sent to your email", "expiresIn": 300}

    async def verify_otp(self, email, otp):
        self._record("verify_otp", email=email, otp=otp)
        if otp != self.valid_otp:
            raise ApiError("Invalid OTP. Please try again.", status=400)
        return {"success": True}

    async def upload_agent_documents(self, first_name, last_name, temp_agent_id, files):
        self._record(
            "upload_agent_documents",
            first_name=first_name,
            last_name=last_name,
            temp_agent_id=temp_agent_id,
            files=dict(files),
        )
        return {
            slot: f"/uploads/agents/{temp_agent_id}/{slot}"
            for slot in files
            if slot not in self.drop_paths
        }

    async def submit_partner_application(self, payload):
        self._record("submit_partner_application", payload=dict(payload))
        return {"success": True, "message": "Application submitted successfully."}

    async def get_settings(self):
        self._record("get_settings")
        return {"success": True, "data": {"general": {"platform_name": "Britannica Overseas"}}}


def pdf(size=1024 * 1024, name="document.pdf"):
    return FileRef(name=name, size=size, media_type="application/pdf", content=b"%PDF-1.4")


def jpeg(size=500 * 1024, name="photo.jpg"):
    return FileRef(name=name, size=size, media_type="image/jpeg", content=b"\xff\xd8\xff")


def png(size=500 * 1024, name="photo.png"):
    return FileRef(name=name, size=size, media_type="image/png", content=b"\x89PNG")


PERSONAL = {
    "firstName": "John",
    "lastName": "Doe",
    "email": EMAIL,
    "phone": "+91 98765 43210",
    "qualification": "MBA",
    "designation": "CEO",
    "experience": "3-5 years",
}

COMPANY = {
    "companyName": "Doe Education Pvt Ltd",
    "companyType": "Private Limited",
    "establishedYear": "2018",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}

EXPERTISE = {
    "specialization": {"MBBS Admissions"},
    "servicesOffered": {"Visa Processing", "Admission Counseling"},
    "currentStudents": "51-100",
    "teamSize": "6-10",
}

PARTNERSHIP = {
    "partnershipType": "Regional Partner",
    "expectedStudents": "26-50",
    "whyPartner": "We already place students abroad.",
}

REQUIRED_DOCUMENTS = {
    DocumentSlot.ID_PROOF: pdf(name="id.pdf"),
    DocumentSlot.COMPANY_LICENCE: pdf(name="licence.pdf"),
    DocumentSlot.AGENT_PHOTO: jpeg(name="agent.jpg"),
    DocumentSlot.COMPANY_PHOTO: png(name="office.png"),
}


def fill(session, values):
    for name, value in values.items():
        session.set_field(name, value)
