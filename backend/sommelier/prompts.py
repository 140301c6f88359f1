"""System prompts and templated replies, per supported language."""

from __future__ import annotations

import json
from collections.abc import Sequence

from .contracts import CatalogItem, PreferenceRecord

STORE_NAME = "Delhaize"

SYSTEM_PROMPTS: dict[str, str] = {
    "en": """You are a professional wine sommelier for {store}. You have access to the current wine selection and give expert advice on choosing wine, food pairings and wine knowledge.

Your personality:
- Knowledgeable but approachable
- Enthusiastic about wine
- Helpful and patient

Guidelines:
- Always recommend specific wines from the available selection
- Explain why each wine is a good choice
- Consider the user's preferences, budget and occasion
- Suggest food pairings when relevant
- Keep answers concise but informative""",
    "fr": """Vous êtes un sommelier professionnel pour {store}. Vous avez accès à la sélection de vins actuelle et donnez des conseils d'expert sur le choix du vin, les accords mets-vins et la culture du vin.

Votre personnalité :
- Compétent mais accessible
- Passionné par le vin
- Serviable et patient

Directives :
- Recommandez toujours des vins précis de la sélection disponible
- Expliquez pourquoi chaque vin est un bon choix
- Tenez compte des préférences, du budget et de l'occasion
- Proposez des accords mets-vins quand c'est pertinent
- Restez concis mais informatif""",
    "nl": """U bent een professionele sommelier voor {store}. U heeft toegang tot de huidige wijnselectie en geeft deskundig advies over wijnkeuze, wijn-spijscombinaties en wijnkennis.

Uw persoonlijkheid:
- Deskundig maar benaderbaar
- Enthousiast over wijn
- Behulpzaam en geduldig

Richtlijnen:
- Beveel altijd specifieke wijnen uit de beschikbare selectie aan
- Leg uit waarom elke wijn een goede keuze is
- Houd rekening met voorkeuren, budget en gelegenheid
- Geef wijn-spijscombinaties wanneer relevant
- Houd antwoorden beknopt maar informatief""",
}

CLARIFICATION_MESSAGES: dict[str, str] = {
    "en": (
        "I'd be happy to help you find the perfect wine! To give you the best recommendations, "
        "could you tell me:\n\n"
        "• What color wine do you prefer? (Red, White, Rosé, or Sparkling)\n"
        "• What's your budget range? (Budget: €0-10, Mid-range: €10-25, Premium: €25-50, Luxury: €50+)\n"
        "• What's the occasion or what food will you be pairing it with?"
    ),
    "fr": (
        "Je serais ravi de vous aider à trouver le vin parfait ! Pour vous donner les meilleures "
        "recommandations, pourriez-vous me dire :\n\n"
        "• Quelle couleur de vin préférez-vous ? (Rouge, Blanc, Rosé ou Effervescent)\n"
        "• Quel est votre budget ? (Économique : €0-10, Milieu de gamme : €10-25, Premium : €25-50, Luxe : €50+)\n"
        "• Quelle est l'occasion, ou avec quels plats l'accompagnerez-vous ?"
    ),
    "nl": (
        "Ik help u graag de perfecte wijn te vinden! Om u de beste aanbevelingen te geven, "
        "kunt u me vertellen:\n\n"
        "• Welke wijnkleur heeft uw voorkeur? (Rood, Wit, Rosé of Mousserend)\n"
        "• Wat is uw budget? (Budget: €0-10, Middensegment: €10-25, Premium: €25-50, Luxe: €50+)\n"
        "• Wat is de gelegenheid, of bij welk gerecht wilt u de wijn drinken?"
    ),
}

_FALLBACK_TEXT: dict[str, dict[str, str]] = {
    "en": {
        "greeting": "I'd be happy to help you find the perfect wine!",
        "color": "Looking for {color} wines",
        "price": "in the {price} price range",
        "found": "I found {count} excellent options for you:",
        "none": "Let me suggest some wines from our selection:",
        "closing": "These wines are available at {store} and would be perfect for your needs!",
    },
    "fr": {
        "greeting": "Je serais ravi de vous aider à trouver le vin parfait !",
        "color": "Recherche de vins {color}",
        "price": "dans la gamme de prix {price}",
        "found": "J'ai trouvé {count} excellentes options pour vous :",
        "none": "Permettez-moi de vous suggérer quelques vins de notre sélection :",
        "closing": "Ces vins sont disponibles chez {store} et seraient parfaits pour vos besoins !",
    },
    "nl": {
        "greeting": "Ik help u graag de perfecte wijn te vinden!",
        "color": "Op zoek naar {color} wijnen",
        "price": "in het {price} prijsbereik",
        "found": "Ik heb {count} uitstekende opties voor u gevonden:",
        "none": "Laat me enkele wijnen uit onze selectie voorstellen:",
        "closing": "Deze wijnen zijn verkrijgbaar bij {store} en zouden perfect zijn voor uw behoeften!",
    },
}

COLOR_LABELS: dict[str, dict[str, str]] = {
    "en": {"red": "red", "white": "white", "rose": "rosé", "sparkling": "sparkling"},
    "fr": {"red": "rouges", "white": "blancs", "rose": "rosés", "sparkling": "effervescents"},
    "nl": {"red": "rode", "white": "witte", "rose": "rosé", "sparkling": "mousserende"},
}

PRICE_LABELS: dict[str, dict[str, str]] = {
    "en": {"budget": "budget", "mid": "mid", "premium": "premium", "luxury": "luxury"},
    "fr": {"budget": "économique", "mid": "moyenne", "premium": "premium", "luxury": "luxe"},
    "nl": {"budget": "budget", "mid": "middensegment", "premium": "premium", "luxury": "luxe"},
}


def _lang(language: str) -> str:
    return language if language in SYSTEM_PROMPTS else "en"


def system_prompt(language: str, store: str = STORE_NAME) -> str:
    return SYSTEM_PROMPTS[_lang(language)].format(store=store)


def clarification_message(language: str) -> str:
    return CLARIFICATION_MESSAGES[_lang(language)]


def format_price(price: float) -> str:
    return f"€{price:g}" if price == int(price) else f"€{price:.2f}"


def user_prompt(message: str, recommendations: Sequence[CatalogItem], sample_size: int = 3) -> str:
    sample = [
        {
            "productName": wine.name,
            "price": wine.price,
            "volume": wine.volume,
            "pricePerLiter": wine.price_per_liter,
        }
        for wine in recommendations[:sample_size]
    ]
    return (
        f'User message: "{message}"\n\n'
        f"Available wines (sample): {json.dumps(sample, ensure_ascii=False, indent=2)}\n\n"
        "Please provide wine advice and recommendations based on the user's request. "
        "Include specific wine names from the available wines and explain why they're good "
        "choices. Keep the response concise and helpful."
    )


def fallback_response(
    preferences: PreferenceRecord,
    recommendations: Sequence[CatalogItem],
    language: str,
    store: str = STORE_NAME,
) -> str:
    lang = _lang(language)
    text = _FALLBACK_TEXT[lang]

    response = text["greeting"]
    wanted = []
    if preferences.color:
        wanted.append(text["color"].format(color=COLOR_LABELS[lang][preferences.color]))
    if preferences.price_range:
        wanted.append(text["price"].format(price=PRICE_LABELS[lang][preferences.price_range]))
    if wanted:
        response += " " + " ".join(wanted) + "."

    if recommendations:
        response += "\n\n" + text["found"].format(count=len(recommendations))
        details = "\n".join(f"• {wine.name} - {format_price(wine.price)}" for wine in recommendations)
        response += f"\n\n{details}"
    else:
        response += "\n\n" + text["none"]

    return response + "\n\n" + text["closing"].format(store=store)


__all__ = [
    "clarification_message",
    "fallback_response",
    "format_price",
    "system_prompt",
    "user_prompt",
]
