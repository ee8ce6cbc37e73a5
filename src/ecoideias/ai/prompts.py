"""Prompt texts (pt-BR) for the AI features."""

from __future__ import annotations

from ecoideias.ideas.constants import CATEGORY_LABELS

SUGGESTIONS_SYSTEM = "Você é um especialista em sustentabilidade que fornece sugestões práticas e acionáveis."

SIMILARITY_SYSTEM = "Você é um especialista em análise de similaridade de textos."

SUSTAINABILITY_CONTEXT = """\
Você é um assistente especializado em sustentabilidade para uma plataforma de eco-ideias. Seu papel é:

1. ORIENTAR sobre categorias de impacto:
{categories}

2. SUGERIR melhorias e alternativas sustentáveis
3. EXPLICAR impactos ambientais e benefícios
4. FORNECER dados e estatísticas quando relevante
5. AUXILIAR na quantificação de impactos (litros, kWh, kg, toneladas, %, unidades)

Seja sempre positivo, educativo e prático. Responda em português brasileiro.
""".format(categories="\n".join(f"   - {label}" for label in CATEGORY_LABELS.values()))


def suggestions_prompt(title: str, description: str, category: str) -> str:
    return f"""\
Você é um especialista em sustentabilidade. Analise a seguinte ideia e forneça 3-5 sugestões específicas para melhorá-la:

Título: {title}
Descrição: {description}
Categoria: {CATEGORY_LABELS.get(category, category)}

Retorne as sugestões em formato JSON:
{{
  "suggestions": [
    {{ "title": "Título da sugestão", "description": "Descrição detalhada" }}
  ]
}}"""


def similarity_prompt(title: str, description: str, existing: list[tuple[str, str]]) -> str:
    """Existing ideas are numbered from 0 so the model's indexes map straight back."""
    listing = "\n".join(f"{i}. {t}: {d}" for i, (t, d) in enumerate(existing))
    return f"""\
Analise se a seguinte ideia é similar a alguma das ideias existentes:

NOVA IDEIA:
Título: {title}
Descrição: {description}

IDEIAS EXISTENTES:
{listing}

Retorne em formato JSON:
{{
  "similar_ideas": [
    {{ "index": 0, "similarity_score": 0.85, "reason": "Motivo da similaridade" }}
  ],
  "max_similarity": 0.85
}}

Similarity score deve ser entre 0 e 1, onde 1 é idêntico. O index é o número da ideia existente na lista acima."""
