"""Keyword-matched canned answers used when no provider can answer.

Rules are checked in order and the first one with a keyword contained in the
lower-cased question wins, so earlier topics take priority over later ones.
"""

from __future__ import annotations

from typing import Tuple


OfflineRule = Tuple[Tuple[str, ...], str]

OFFLINE_RULES: Tuple[OfflineRule, ...] = (
    (
        ("qui es", "toi", "assistant"),
        "Je suis le guide de la Maison : je réponds avec les règles de l'expérience.",
    ),
    (
        ("social", "réseau", "story", "post", "like", "dm"),
        "Les signaux sociaux (likes, stories, DMs) servent à prédire humeur, opinions et influence. "
        "Réduis la géoloc et segmente tes audiences.",
    ),
    (
        ("achat", "panier", "commerce", "abonnement", "prix"),
        "Les paniers et abonnements calculent ton pouvoir d'achat et tes routines. "
        "Varie les moyens de paiement et purge l'historique d'achat.",
    ),
    (
        ("trajet", "gps", "locali", "déplacement"),
        "Quelques jours de GPS suffisent pour trouver domicile et lieux sensibles. "
        "Coupe la géoloc en tâche de fond et sépare profils pro/perso.",
    ),
    (
        ("santé", "sommeil", "humeur", "sensibl", "coeur", "spo2"),
        "Les données santé/sommeil sont sensibles : vérifie les permissions, désactive le partage tiers "
        "et conserve un export chiffré seulement si besoin.",
    ),
    (
        ("rgpd", "droit", "contrôle", "export", "effacement", "suppression"),
        "Tes leviers : accès/portabilité pour récupérer, rectification pour corriger, "
        "effacement pour supprimer, opposition pour bloquer la pub ciblée.",
    ),
    (
        ("navig", "visiter", "guide"),
        "Utilise la téléportation pour changer de pièce, ou marche avec ZQSD/flèches. "
        "Clique sur les panneaux pour déclencher les interactions.",
    ),
)

GENERIC_PROMPT = "Parle-moi de réseaux, achats, trajets, santé/sensibles ou contrôle et je te répondrai."


def offline_reply(question: str | None = "") -> str:
    text = (question or "").lower()
    for keywords, answer in OFFLINE_RULES:
        if any(keyword in text for keyword in keywords):
            return answer
    return GENERIC_PROMPT
