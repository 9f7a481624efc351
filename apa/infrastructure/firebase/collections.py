"""Firestore collection names and the composite indexes the services rely on.

Firestore has no DDL or migrations. Collections are created automatically
when the first document is written; these constants are the single source
of truth for the "schema". COMPOSITE_INDEXES mirrors firestore.indexes.json
at the repository root.
"""

from apa.application.dtos.record import ASCENDING, DESCENDING
from apa.infrastructure.indexes import IndexSpec

COLLECTION_PETS = "pets"
COLLECTION_LEADS_ADOPTION = "leads_adoption"
COLLECTION_LEADS_VOLUNTEER = "leads_volunteer"
COLLECTION_LEADS_FOSTER = "leads_lt"
COLLECTION_LOST_PETS = "lost_pets"
COLLECTION_POSTS = "posts"
COLLECTION_PARTNERS = "partners"
COLLECTION_RESCUES = "rescues"
COLLECTION_MEDICAL_RECORDS = "medical_records"
COLLECTION_USERS = "users"
COLLECTION_FLAGS = "flags"
COLLECTION_CONFIG = "config"

DOC_FLAGS_GLOBAL = "global"
DOC_CONFIG_GENERAL = "general"

COMPOSITE_INDEXES: frozenset[IndexSpec] = frozenset({
    IndexSpec(COLLECTION_LEADS_ADOPTION, ("petId", "userId"), (("createdAt", DESCENDING),)),
    IndexSpec(COLLECTION_LEADS_VOLUNTEER, ("userId",), (("createdAt", DESCENDING),)),
    IndexSpec(COLLECTION_LEADS_FOSTER, ("userId",), (("createdAt", DESCENDING),)),
    IndexSpec(COLLECTION_LOST_PETS, ("moderationStatus",), (("createdAt", DESCENDING),)),
    IndexSpec(COLLECTION_PETS, ("status",), (("createdAt", DESCENDING),)),
    IndexSpec(COLLECTION_POSTS, ("isActive",), (("publishDate", DESCENDING),)),
    IndexSpec(COLLECTION_PARTNERS, ("isActive",), (("order", ASCENDING),)),
    IndexSpec(COLLECTION_MEDICAL_RECORDS, ("petId",), (("date", DESCENDING),)),
})
