"""
Document labels.

Per-language section titles, field labels and placeholder strings for the
rendered summary. Missing languages and missing keys fall back to English;
lookups never raise. Catalogs are built once per process and memoized.
"""

from collections.abc import Iterator, Mapping
from functools import lru_cache

DEFAULT_LANGUAGE = "en"

LABEL_KEYS: tuple[str, ...] = (
    "summary_title",
    "meeting_header",
    "meeting_title",
    "companies_parties",
    "date",
    "duration",
    "link_reference",
    "action_items",
    "for_each_action",
    "action_verb_object",
    "owner",
    "due_date",
    "notes_context",
    "meeting_purpose",
    "purpose_one_sentence",
    "key_points",
    "short_list_each_point",
    "point_title",
    "point_explanation",
    "topics_detailed",
    "topic",
    "issue_description",
    "key_observations",
    "root_cause",
    "impact",
    "path_forward",
    "definition_of_success",
    "agreed_next_attempt",
    "decision_point",
    "checkpoint_date",
    "next_steps",
    "party_a",
    "party_b",
    "step",
    "not_provided",
    "not_found",
)

_CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        "summary_title": "Meeting Summary",
        "meeting_header": "Meeting Header",
        "meeting_title": "Meeting title",
        "companies_parties": "Companies / parties",
        "date": "Date",
        "duration": "Duration",
        "link_reference": "Link / reference",
        "action_items": "Action Items",
        "for_each_action": "For each action: what, who, when, and context",
        "action_verb_object": "Action",
        "owner": "Owner",
        "due_date": "Due date",
        "notes_context": "Notes / context",
        "meeting_purpose": "Meeting Purpose",
        "purpose_one_sentence": "Purpose (one sentence)",
        "key_points": "Key Points",
        "short_list_each_point": "Short list; one explanation per point",
        "point_title": "Point",
        "point_explanation": "Explanation",
        "topics_detailed": "Topics (Detailed)",
        "topic": "Topic",
        "issue_description": "Issue description",
        "key_observations": "Key observations",
        "root_cause": "Root cause",
        "impact": "Impact",
        "path_forward": "Path Forward",
        "definition_of_success": "Definition of success",
        "agreed_next_attempt": "Agreed next attempt",
        "decision_point": "Decision point",
        "checkpoint_date": "Checkpoint date",
        "next_steps": "Next Steps",
        "party_a": "Party A",
        "party_b": "Party B",
        "step": "Step",
        "not_provided": "Not provided",
        "not_found": "Not found",
    },
    "es": {
        "summary_title": "Resumen de la reunión",
        "meeting_header": "Encabezado de la reunión",
        "meeting_title": "Título de la reunión",
        "companies_parties": "Empresas / partes",
        "date": "Fecha",
        "duration": "Duración",
        "link_reference": "Enlace / referencia",
        "action_items": "Acciones",
        "for_each_action": "Para cada acción: qué, quién, cuándo y contexto",
        "action_verb_object": "Acción",
        "owner": "Responsable",
        "due_date": "Fecha límite",
        "notes_context": "Notas / contexto",
        "meeting_purpose": "Propósito de la reunión",
        "purpose_one_sentence": "Propósito (una frase)",
        "key_points": "Puntos clave",
        "short_list_each_point": "Lista breve; una explicación por punto",
        "point_title": "Punto",
        "point_explanation": "Explicación",
        "topics_detailed": "Temas (detallados)",
        "topic": "Tema",
        "issue_description": "Descripción del problema",
        "key_observations": "Observaciones clave",
        "root_cause": "Causa raíz",
        "impact": "Impacto",
        "path_forward": "Camino a seguir",
        "definition_of_success": "Definición de éxito",
        "agreed_next_attempt": "Próximo intento acordado",
        "decision_point": "Punto de decisión",
        "checkpoint_date": "Fecha de control",
        "next_steps": "Próximos pasos",
        "party_a": "Parte A",
        "party_b": "Parte B",
        "step": "Paso",
        "not_provided": "No proporcionado",
        "not_found": "No encontrado",
    },
    "ro": {
        "summary_title": "Rezumatul întâlnirii",
        "meeting_header": "Antetul întâlnirii",
        "meeting_title": "Titlul întâlnirii",
        "companies_parties": "Companii / părți",
        "date": "Data",
        "duration": "Durata",
        "link_reference": "Link / referință",
        "action_items": "Acțiuni",
        "for_each_action": "Pentru fiecare acțiune: ce, cine, când și context",
        "action_verb_object": "Acțiune",
        "owner": "Responsabil",
        "due_date": "Termen",
        "notes_context": "Note / context",
        "meeting_purpose": "Scopul întâlnirii",
        "purpose_one_sentence": "Scop (o propoziție)",
        "key_points": "Puncte cheie",
        "short_list_each_point": "Listă scurtă; o explicație pentru fiecare punct",
        "point_title": "Punct",
        "point_explanation": "Explicație",
        "topics_detailed": "Subiecte (detaliat)",
        "topic": "Subiect",
        "issue_description": "Descrierea problemei",
        "key_observations": "Observații cheie",
        "root_cause": "Cauza principală",
        "impact": "Impact",
        "path_forward": "Calea de urmat",
        "definition_of_success": "Definiția succesului",
        "agreed_next_attempt": "Următoarea încercare convenită",
        "decision_point": "Punct de decizie",
        "checkpoint_date": "Data de verificare",
        "next_steps": "Pașii următori",
        "party_a": "Partea A",
        "party_b": "Partea B",
        "step": "Pasul",
        "not_provided": "Nefurnizat",
        "not_found": "Negăsit",
    },
    "fr": {
        "summary_title": "Compte rendu de réunion",
        "meeting_header": "En-tête de la réunion",
        "meeting_title": "Titre de la réunion",
        "companies_parties": "Entreprises / parties",
        "date": "Date",
        "duration": "Durée",
        "link_reference": "Lien / référence",
        "action_items": "Actions",
        "for_each_action": "Pour chaque action : quoi, qui, quand et contexte",
        "action_verb_object": "Action",
        "owner": "Responsable",
        "due_date": "Échéance",
        "notes_context": "Notes / contexte",
        "meeting_purpose": "Objectif de la réunion",
        "purpose_one_sentence": "Objectif (une phrase)",
        "key_points": "Points clés",
        "short_list_each_point": "Liste courte ; une explication par point",
        "point_title": "Point",
        "point_explanation": "Explication",
        "topics_detailed": "Sujets (détaillés)",
        "topic": "Sujet",
        "issue_description": "Description du problème",
        "key_observations": "Observations clés",
        "root_cause": "Cause racine",
        "impact": "Impact",
        "path_forward": "Marche à suivre",
        "definition_of_success": "Définition du succès",
        "agreed_next_attempt": "Prochaine tentative convenue",
        "decision_point": "Point de décision",
        "checkpoint_date": "Date de contrôle",
        "next_steps": "Prochaines étapes",
        "party_a": "Partie A",
        "party_b": "Partie B",
        "step": "Étape",
        "not_provided": "Non fourni",
        "not_found": "Introuvable",
    },
}

SUPPORTED_LANGUAGES: frozenset[str] = frozenset(_CATALOGS)


def normalize_language(language: str | None) -> str:
    """Reduce a language tag (e.g. "es-ES", "PT_br") to a lower-case base code."""
    if not language or not language.strip():
        return DEFAULT_LANGUAGE
    return language.strip().lower().replace("_", "-").split("-")[0]


class DocumentLabels(Mapping[str, str]):
    """Read-only label catalog; unknown keys resolve to an empty string."""

    def __init__(self, language: str, labels: dict[str, str]) -> None:
        self.language = language
        self._labels = labels

    def __getitem__(self, key: str) -> str:
        return self._labels.get(key, "")

    def __contains__(self, key: object) -> bool:
        return key in self._labels

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)


@lru_cache
def _resolved_catalog(language: str) -> DocumentLabels:
    fallback = _CATALOGS[DEFAULT_LANGUAGE]
    resolved = language if language in _CATALOGS else DEFAULT_LANGUAGE
    target = _CATALOGS[resolved]
    merged = {}
    for key in LABEL_KEYS:
        value = target.get(key, "")
        merged[key] = value if value.strip() else fallback.get(key, "")
    return DocumentLabels(resolved, merged)


def get_labels(language: str | None = None) -> DocumentLabels:
    """
    Return the read-only label catalog for a language.

    Unknown languages resolve to English; keys missing from a catalog take the
    English value.
    """
    return _resolved_catalog(normalize_language(language))
