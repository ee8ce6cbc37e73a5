"""Idea status and category vocabularies."""

from __future__ import annotations

import enum


class IdeaStatus(str, enum.Enum):
    """Review status of an idea. Values are the stored (and displayed) labels."""

    IN_REVIEW = "Em Análise"
    APPROVED = "Aprovada"
    REJECTED = "Reprovada"


class IdeaCategory(str, enum.Enum):
    """Sustainability domain an idea belongs to."""

    WATER = "water"
    ENERGY = "energy"
    WASTE = "waste"
    TRANSPORT = "transport"
    MATERIALS = "materials"
    BIODIVERSITY = "biodiversity"


CATEGORY_LABELS: dict[str, str] = {
    IdeaCategory.WATER.value: "Conservação de Água",
    IdeaCategory.ENERGY.value: "Eficiência Energética",
    IdeaCategory.WASTE.value: "Redução de Resíduos",
    IdeaCategory.TRANSPORT.value: "Transporte Sustentável",
    IdeaCategory.MATERIALS.value: "Materiais Sustentáveis",
    IdeaCategory.BIODIVERSITY.value: "Biodiversidade",
}


class ActivityType(str, enum.Enum):
    """Kinds of entries written to the activity log."""

    IDEA_CREATED = "idea_created"
    IDEA_APPROVED = "idea_approved"
    IDEA_REJECTED = "idea_rejected"
    IDEA_STATUS_CHANGED = "idea_status_changed"
    IDEA_IMPLEMENTED = "idea_implemented"
