"""Multilingual consent vocabulary and match functions.

Pure data plus stateless match helpers.  Exclusion patterns are an
unconditional veto: :func:`is_excluded` is checked before any accept
scoring and nothing downstream can override it.
"""

from __future__ import annotations

import enum
import re

# Labels longer than this are paragraph text, not button labels.
MAX_LABEL_LENGTH = 50

_I = re.IGNORECASE


class MatchTier(enum.IntEnum):
    """Specificity of an accept match, strongest last."""

    NONE = 0
    PATTERN = 1
    SUBSTRING = 2
    PREFIX = 3
    EXACT = 4


# ============================================================================
# Accept phrases
# ============================================================================

# Strong affirmatives: may also match as a prefix or a whole-word
# substring of a longer label ("accept all cookies now").
STRONG_ACCEPT_PHRASES: tuple[str, ...] = (
    # English
    "accept all cookies",
    "accept all",
    "accept cookies",
    "accept and continue",
    "accept",
    "agree to all",
    "agree",
    "i agree",
    "i accept",
    "allow all cookies",
    "allow all",
    "allow cookies",
    "enable all",
    "consent",
    # German
    "alle akzeptieren",
    "akzeptieren",
    "allen zustimmen",
    "zustimmen",
    "ich stimme zu",
    "einverstanden",
    # French
    "tout accepter",
    "accepter et continuer",
    "accepter",
    "j'accepte",
    # Spanish
    "aceptar todo",
    "aceptar",
    "acepto",
    # Italian
    "accetta tutto",
    "accetta",
    "accetto",
    # Dutch
    "alles accepteren",
    "accepteren",
    "akkoord",
    # Portuguese
    "aceitar tudo",
    "aceitar",
    "concordo",
    # Polish
    "zaakceptuj",
    "zgadzam się",
    # Russian
    "принять",
    "согласен",
)

# Generic acknowledgements: only ever count as a whole-label match,
# "ok" inside "book now" or "yes" inside a survey question never scores.
WEAK_ACCEPT_PHRASES: tuple[str, ...] = (
    "ok",
    "okay",
    "allow",
    "yes",
    "got it",
    "continue",
    "understood",
    "i understand",
    "verstanden",
    "compris",
    "d'accord",
    "de acuerdo",
    "понятно",
)

# Anchored whole-label variants that the literal phrases do not cover.
ACCEPT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^accept\s*(cookies?|&|and)?\s*(continue|close)?$", _I),
    re.compile(r"^(accept|allow)\s+(all\s+)?(and|&)\s+(close|continue)$", _I),
    re.compile(r"^agree(\s+to\s+all)?(\s+and\s+(close|continue))?$", _I),
    re.compile(r"^i\s+(agree|accept)(\s+to\s+all)?$", _I),
    re.compile(r"^(got\s+it|ok(ay)?|yes|continue|understood)[!.]?$", _I),
    re.compile(r"^yes,?\s+i'?m\s+happy$", _I),
    re.compile(r"^that'?s\s+(ok|fine|okay)$", _I),
    re.compile(r"^(sounds\s+good|no\s+problem)$", _I),
    re.compile(r"^(enable|allow)\s+all(\s+cookies)?$", _I),
    re.compile(r"^(alle\s+)?(cookies\s+)?akzeptieren(\s+und\s+(weiter|schließen))?$", _I),
    re.compile(r"^(allen\s+)?zustimmen(\s+und\s+weiter)?$", _I),
    re.compile(r"^(tout\s+)?accepter(\s+et\s+(continuer|fermer))?$", _I),
    re.compile(r"^j'?accepte(\s+tout)?$", _I),
    re.compile(r"^aceptar(\s+(todo|todas|cookies))?(\s+y\s+(continuar|cerrar))?$", _I),
    re.compile(r"^accett[ao](\s+tutt[oi])?(\s+e\s+(continua|chiudi))?$", _I),
    re.compile(r"^(alles\s+|alle\s+cookies\s+)?accepteren$", _I),
    re.compile(r"^aceitar(\s+(tudo|todos))?(\s+e\s+(continuar|fechar))?$", _I),
    re.compile(r"^(zaakceptuj(\s+wszystko)?|zgadzam\s+się|akceptuję)$", _I),
    re.compile(r"^(принять(\s+все)?|согласен|согласна|понятно)$", _I),
)

# ============================================================================
# Save / confirm phrases (second step of two-step frameworks)
# ============================================================================

SAVE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^save(\s+(my|and\s+exit|&\s+exit|and\s+close|&\s+close))?(\s+(preferences|settings|choices|selection|consent))?$", _I),
    re.compile(r"^confirm(\s+(my\s+)?(choices|selection|preferences|consent))?$", _I),
    re.compile(r"^(accept|allow)\s+(my\s+)?(selection|selected|choices)$", _I),
    re.compile(r"^(einstellungen\s+|auswahl\s+)?speichern(\s+und\s+schließen)?$", _I),
    re.compile(r"^(auswahl\s+)?bestätigen$", _I),
    re.compile(r"^(enregistrer|confirmer|valider)(\s+(mes\s+)?(choix|préférences|paramètres))?$", _I),
    re.compile(r"^(guardar|confirmar)(\s+(configuración|preferencias|selección))?$", _I),
    re.compile(r"^(salva|conferma)(\s+(le\s+)?(preferenze|scelte|impostazioni))?$", _I),
    re.compile(r"^(voorkeuren\s+)?(opslaan|bevestigen)$", _I),
    re.compile(r"^(salvar|confirmar)(\s+(preferências|escolhas))?$", _I),
    re.compile(r"^(zapisz|potwierdź)(\s+(ustawienia|wybór))?$", _I),
    re.compile(r"^(сохранить|подтвердить)(\s+(настройки|выбор))?$", _I),
)

# ============================================================================
# Exclusion groups
# ============================================================================

SETTINGS_EXCLUSIONS: tuple[re.Pattern[str], ...] = (
    re.compile(r"settings|preferences|customi[sz]e|manage|options|configure", _I),
    re.compile(r"einstellungen|anpassen|paramètres|personnaliser|configurar|personalizar|impostazioni|instellingen|настройки", _I),
)

REJECT_EXCLUSIONS: tuple[re.Pattern[str], ...] = (
    re.compile(r"reject|decline|deny|refuse|no\s*thanks|opt[\s-]*out|do\s+not\s+(accept|allow|sell)|withdraw|revoke", _I),
    re.compile(r"(necessary|essential|required)\s*(cookies\s*)?only|only\s+(necessary|essential)", _I),
    re.compile(r"ablehnen|verweigern|widerrufen|refuser|rechazar|rifiuta|weigeren|recusar|odrzuć|отклонить", _I),
    re.compile(r"\b(accept|allow)\s+(the\s+)?(necessary|essential|required|strictly)\b", _I),
    re.compile(
        r"\b(not|don'?t|do\s+not|nicht|no|non|nie|niet|não|nao|не)\s+"
        r"(accept|agree|allow|consent|akzeptier|zustimm|einverstanden|acept|accett|zgadzam|akceptuj|akkoord|aceit|принима|соглас)",
        _I,
    ),
    re.compile(r"\bn['’]\s*accept|\b(akzeptier\w*|accept\w*)\s+(nicht|pas)\b", _I),
)

LINK_EXCLUSIONS: tuple[re.Pattern[str], ...] = (
    re.compile(r"policy|terms|conditions|learn\s*more|read\s*more|more\s+info|details|imprint|impressum", _I),
    re.compile(r"datenschutz|mehr\s+erfahren|en\s+savoir\s+plus|más\s+información|saperne\s+di\s+più", _I),
)

PRIVACY_LINK_EXCLUSIONS: tuple[re.Pattern[str], ...] = (re.compile(r"privacy|confidentialité|privacidad", _I),)

ACCOUNT_EXCLUSIONS: tuple[re.Pattern[str], ...] = (
    re.compile(r"sign\s*(up|in|out)|log\s*(in|out|on)|register|create\s+account|my\s+account|password", _I),
    re.compile(r"anmelden|registrieren|se\s+connecter|s'inscrire|iniciar\s+sesión|registrarse|accedi|inloggen|войти", _I),
)

SOCIAL_EXCLUSIONS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(follow|subscribe|unsubscribe|like|share|comment|reply|post|tweet|retweet|join|newsletter)\b", _I),
    re.compile(r"abonnieren|folgen|s'abonner|suscribirse|iscriviti|подписаться", _I),
)

COMMERCE_EXCLUSIONS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(download|install|buy|purchase|checkout|check\s+out|donate|apply|order|pay|upgrade|trial)\b", _I),
    re.compile(r"add\s*to\s*(cart|bag|basket)|kaufen|bestellen|acheter|comprar|acquista", _I),
)

# Every group vetoes the first (accept) activation.
EXCLUSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    SETTINGS_EXCLUSIONS
    + REJECT_EXCLUSIONS
    + LINK_EXCLUSIONS
    + PRIVACY_LINK_EXCLUSIONS
    + ACCOUNT_EXCLUSIONS
    + SOCIAL_EXCLUSIONS
    + COMMERCE_EXCLUSIONS
)

# The save step legitimately talks about preferences and privacy
# settings; everything that rejects, navigates or acts on an account
# still vetoes it.
CONFIRM_EXCLUSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    REJECT_EXCLUSIONS + LINK_EXCLUSIONS + ACCOUNT_EXCLUSIONS + SOCIAL_EXCLUSIONS + COMMERCE_EXCLUSIONS
)

# ============================================================================
# Cookie-context vocabulary
# ============================================================================

COOKIE_CONTEXT_WORDS: tuple[str, ...] = (
    "cookie",
    "consent",
    "gdpr",
    "dsgvo",
    "rgpd",
    "ccpa",
    "privacy",
    "tracking",
    "personalization",
    "personalisation",
    "personal data",
    "your data",
    "advertising",
    "partners",
    "we use",
    "this site uses",
    "this website uses",
    "your experience",
    "asks for your consent",
    "datenschutz",
    "confidentialité",
    "privacidad",
    "données personnelles",
)

# Tokens in class/id/aria-label that mark a banner container outright.
CONTAINER_TOKENS: tuple[str, ...] = (
    "cookie",
    "consent",
    "gdpr",
    "cmp",
    "privacy-banner",
    "privacy_banner",
    "privacybanner",
    "cc-banner",
    "cc-window",
)

MODAL_TOKENS: tuple[str, ...] = ("modal", "overlay", "popup", "dialog", "lightbox")


# ============================================================================
# Match helpers
# ============================================================================


def _phrase_re(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)", _I)


_STRONG_PHRASE_RES = tuple((phrase, _phrase_re(phrase)) for phrase in STRONG_ACCEPT_PHRASES)
_ALL_PHRASES = frozenset(STRONG_ACCEPT_PHRASES + WEAK_ACCEPT_PHRASES)


def is_label_length(text: str) -> bool:
    return 0 < len(text) <= MAX_LABEL_LENGTH


def accept_tier(text: str) -> MatchTier:
    """Classify how specifically *text* matches an accept phrase.

    Returns :attr:`MatchTier.NONE` for empty or over-long labels.
    """
    label = text.strip().lower()
    if not is_label_length(label):
        return MatchTier.NONE
    if label in _ALL_PHRASES:
        return MatchTier.EXACT
    best = MatchTier.NONE
    for phrase, phrase_re in _STRONG_PHRASE_RES:
        match = phrase_re.search(label)
        if match is None:
            continue
        if match.start() == 0:
            return MatchTier.PREFIX
        best = MatchTier.SUBSTRING
    if best is MatchTier.NONE and any(p.match(label) for p in ACCEPT_PATTERNS):
        return MatchTier.PATTERN
    return best


def is_save_label(text: str) -> bool:
    """True if *text* is a save/confirm label of a two-step framework."""
    label = text.strip().lower()
    return is_label_length(label) and any(p.match(label) for p in SAVE_PATTERNS)


def is_excluded(text: str, href: str | None = None, *, patterns: tuple[re.Pattern[str], ...] = EXCLUSION_PATTERNS) -> bool:
    """True if the signature, or a link's href target, hits any exclusion."""
    if any(p.search(text) for p in patterns):
        return True
    return bool(href) and any(p.search(href) for p in patterns)


def matched_exclusion(text: str, href: str | None = None, *, patterns: tuple[re.Pattern[str], ...] = EXCLUSION_PATTERNS) -> str | None:
    """Return the first exclusion pattern source that matched, for diagnostics."""
    for p in patterns:
        if p.search(text) or (href and p.search(href)):
            return p.pattern
    return None


def has_cookie_context(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in COOKIE_CONTEXT_WORDS)


def has_container_token(identity: str) -> bool:
    return any(token in identity for token in CONTAINER_TOKENS)


def has_modal_token(identity: str) -> bool:
    return any(token in identity for token in MODAL_TOKENS)
