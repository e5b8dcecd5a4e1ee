"""
Draft application storage.

FieldStore holds the applicant's answers as a flat mapping plus one slot per
supporting document. It does no validation of its own; StepValidator and
DocumentStagingUploader decide what may be stored and when a step is done.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional


class DocumentSlot(str, Enum):
    """Named upload slots of the application."""
    ID_PROOF = "idProof"
    COMPANY_LICENCE = "companyLicence"
    AGENT_PHOTO = "agentPhoto"
    COMPANY_PHOTO = "companyPhoto"
    IDENTITY_DOCUMENT = "identityDocument"
    COMPANY_REGISTRATION = "companyRegistration"
    RESUME = "resume"

    @property
    def required(self) -> bool:
        return self in REQUIRED_SLOTS

    @property
    def is_photo(self) -> bool:
        return self in PHOTO_SLOTS

    @property
    def label(self) -> str:
        """'companyLicence' -> 'Company Licence', 'idProof' -> 'ID Proof'."""
        words = []
        current = ""
        for char in self.value:
            if char.isupper() and current:
                words.append(current)
                current = char
            else:
                current += char
        words.append(current)
        return " ".join(LABEL_ACRONYMS.get(word.lower(), word.capitalize()) for word in words)


# Words shown in capitals in slot labels
LABEL_ACRONYMS = {"id": "ID"}

REQUIRED_SLOTS = (
    DocumentSlot.ID_PROOF,
    DocumentSlot.COMPANY_LICENCE,
    DocumentSlot.AGENT_PHOTO,
    DocumentSlot.COMPANY_PHOTO,
)
PHOTO_SLOTS = (DocumentSlot.AGENT_PHOTO, DocumentSlot.COMPANY_PHOTO)


@dataclass(frozen=True)
class FileRef:
    """A file chosen by the applicant, not yet sent to the backend."""
    name: str
    size: int
    media_type: str
    content: bytes = field(default=b"", repr=False)


# Multi-select checkbox groups
MULTI_SELECT_FIELDS = ("specialization", "servicesOffered")

DEFAULT_DRAFT: Dict[str, Any] = {
    # Personal
    "firstName": "",
    "lastName": "",
    "email": "",
    "phone": "",
    "alternatePhone": "",
    "qualification": "",
    "designation": "",
    "experience": "",
    # Company
    "companyName": "",
    "companyType": "",
    "registrationNumber": "",
    "establishedYear": "",
    "website": "",
    "address": "",
    "city": "",
    "state": "",
    "pincode": "",
    "country": "India",
    # Expertise
    "specialization": frozenset(),
    "servicesOffered": frozenset(),
    "currentStudents": "",
    "teamSize": "",
    "annualRevenue": "",
    # Partnership
    "partnershipType": "",
    "expectedStudents": "",
    "marketingBudget": "",
    "references": "",
    "whyPartner": "",
    "additionalInfo": "",
    # Review
    "termsAccepted": False,
    "dataConsent": False,
}


def as_slot(slot) -> DocumentSlot:
    """Accept a DocumentSlot or its wire name. Raises ValueError otherwise."""
    if isinstance(slot, DocumentSlot):
        return slot
    return DocumentSlot(slot)


@dataclass(frozen=True)
class DraftSnapshot:
    """Immutable copy of the draft taken for validation or submission."""
    fields: Mapping[str, Any]
    documents: Mapping[DocumentSlot, FileRef]

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def has_document(self, slot: DocumentSlot) -> bool:
        return slot in self.documents

    def to_payload(self) -> Dict[str, Any]:
        """Fields as JSON-ready values. Sets become sorted lists."""
        payload: Dict[str, Any] = {}
        for name, value in self.fields.items():
            if isinstance(value, (set, frozenset)):
                payload[name] = sorted(value)
            else:
                payload[name] = value
        return payload


class FieldStore:
    """Mutable draft application plus document slots."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._fields: Dict[str, Any] = {}
        self._documents: Dict[DocumentSlot, FileRef] = {}
        self.clear()
        if initial:
            for name, value in initial.items():
                self.set(name, value)

    # --- Fields ---

    def get(self, name: str, default: Any = None) -> Any:
        return self._fields.get(name, default)

    def set(self, name: str, value: Any) -> None:
        """Overwrite a single field. Multi-select values are stored as sets."""
        if name in MULTI_SELECT_FIELDS:
            value = self._coerce_choices(value)
        self._fields[name] = value

    def add_choice(self, name: str, item: str) -> None:
        self._require_multi_select(name)
        self._fields[name] = self._fields.get(name, frozenset()) | {item}

    def remove_choice(self, name: str, item: str) -> None:
        self._require_multi_select(name)
        self._fields[name] = self._fields.get(name, frozenset()) - {item}

    def toggle_choice(self, name: str, item: str) -> bool:
        """Flip one option of a multi-select field. Returns True if now selected."""
        self._require_multi_select(name)
        if item in self._fields.get(name, frozenset()):
            self.remove_choice(name, item)
            return False
        self.add_choice(name, item)
        return True

    # --- Documents ---

    def document(self, slot) -> Optional[FileRef]:
        return self._documents.get(as_slot(slot))

    def set_document(self, slot, file_ref: Optional[FileRef]) -> None:
        slot = as_slot(slot)
        if file_ref is None:
            self._documents.pop(slot, None)
        else:
            self._documents[slot] = file_ref

    def filled_slots(self) -> List[DocumentSlot]:
        """Non-empty slots in declaration order."""
        return [slot for slot in DocumentSlot if slot in self._documents]

    # --- Whole draft ---

    def snapshot(self) -> DraftSnapshot:
        return DraftSnapshot(
            fields=MappingProxyType(dict(self._fields)),
            documents=MappingProxyType(dict(self._documents)),
        )

    def clear(self) -> None:
        """Restore every field to its default and empty all document slots."""
        self._fields = dict(DEFAULT_DRAFT)
        self._documents = {}

    @staticmethod
    def _coerce_choices(value: Any) -> FrozenSet[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset([value]) if value else frozenset()
        if isinstance(value, Iterable):
            return frozenset(str(item) for item in value)
        raise TypeError(f"Expected a collection of options, got {type(value).__name__}")

    @staticmethod
    def _require_multi_select(name: str) -> None:
        if name not in MULTI_SELECT_FIELDS:
            raise KeyError(f"{name} is not a multi-select field")
