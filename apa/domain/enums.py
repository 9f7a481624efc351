"""Domain enumerations for the APA back office.

Stored values are the ones the public site and the admin panel already
read from Firestore (Portuguese labels where the collections use them).
"""

from enum import Enum


class UserRole(str, Enum):
    """Role stored on users/{uid}. Only admins may run workflow transitions."""

    USER = "user"
    ADMIN = "admin"


class LeadStatus(str, Enum):
    """Status of adoption, volunteer and foster-home leads."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONTACTED = "contacted"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings."""
        return [status.value for status in cls]

    @classmethod
    def active(cls) -> frozenset[str]:
        """Statuses that block a new submission for the same applicant."""
        return frozenset({cls.PENDING.value, cls.APPROVED.value, cls.CONTACTED.value})


class PetStatus(str, Enum):
    """Adoption listing status."""

    PENDENTE = "pendente"
    DISPONIVEL = "disponível"
    ADOTADO = "adotado"
    INDISPONIVEL = "indisponível"


class ModerationStatus(str, Enum):
    """Moderation axis of a lost/found post."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LostPetStatus(str, Enum):
    """Found/lost axis of a lost/found post (independent of moderation)."""

    PERDIDO = "perdido"
    ENCONTRADO = "encontrado"


class RescueStatus(str, Enum):
    PENDENTE = "pendente"
    EM_ANDAMENTO = "em_andamento"
    CONCLUIDO = "concluido"
    CANCELADO = "cancelado"


class RescueUrgency(str, Enum):
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"
    CRITICA = "critica"


class MedicalRecordStatus(str, Enum):
    AGENDADO = "agendado"
    CONCLUIDO = "concluido"
    CANCELADO = "cancelado"


class MedicalRecordType(str, Enum):
    CONSULTA = "consulta"
    VACINA = "vacina"
    CIRURGIA = "cirurgia"
    EXAME = "exame"


class PetSpecies(str, Enum):
    CACHORRO = "Cachorro"
    GATO = "Gato"


class PetGender(str, Enum):
    MACHO = "Macho"
    FEMEA = "Fêmea"


class PetSize(str, Enum):
    PEQUENO = "P"
    MEDIO = "M"
    GRANDE = "G"


class AgeUnit(str, Enum):
    """Unit of a listing's age; the stored age string is singularised for 1."""

    ANOS = "anos"
    MESES = "meses"

    def label(self, value: int) -> str:
        """Return e.g. '1 ano', '3 anos', '1 mês', '5 meses'."""
        if value == 1:
            return "1 ano" if self is AgeUnit.ANOS else "1 mês"
        return f"{value} {self.value}"


class LostPetSpecies(str, Enum):
    CACHORRO = "cachorro"
    GATO = "gato"
    OUTRO = "outro"


class VolunteerArea(str, Enum):
    LIMPEZA = "limpeza"
    EVENTOS = "eventos"
    PASSEIOS = "passeios"
    OUTROS = "outros"


class DwellingType(str, Enum):
    CASA = "casa"
    APARTAMENTO = "apartamento"
    SITIO = "sitio"


class YesNo(str, Enum):
    SIM = "sim"
    NAO = "nao"


class PostCategory(str, Enum):
    NOTICIA = "notícia"
    RESULTADO = "resultado"
    EVENTO = "evento"
    HISTORIA = "história"


class FeatureFlag(str, Enum):
    """Site sections that can be switched off from flags/global."""

    ADOPTION = "adoption"
    DONATIONS = "donations"
    LOST_PETS = "lostPets"
    PARTNERS = "partners"
    STORIES = "stories"
    VOLUNTEERS = "volunteers"

    @classmethod
    def values(cls) -> list[str]:
        return [flag.value for flag in cls]
