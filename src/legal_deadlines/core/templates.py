"""
Deadline Template Registry
Jurisdiction-specific statutory deadline rules and the matching logic that selects them per document
"""

import re
from typing import List, Optional, Sequence

from .models import (
    DeadlineTemplate,
    MAX_AUTO_DEADLINES_PER_DOC,
    OVERLAY_JURISDICTIONS,
    PRIORITY_SCORES
)


def _rx(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


# Shared reminder schedules (minutes before due date)
_REMIND_4W = (43200, 20160, 10080, 4320, 1440)
_REMIND_4W_SHORT = (43200, 20160, 10080, 4320)
_REMIND_2W = (20160, 10080, 4320, 1440)
_REMIND_1W = (10080, 4320, 1440, 180, 60)
_REMIND_1W_SHORT = (10080, 4320, 1440, 180)
_REMIND_3D = (4320, 1440, 180, 60)

_SERVICE_HINT = _rx(r'\b(zustellung|zugestellt|zugang|erhalten)\b')

DEADLINE_TEMPLATES = (
    # Deutschland (DE)
    DeadlineTemplate(
        id_suffix='widerspruch-vwgo-70',
        title='Widerspruchsfrist (§ 70 VwGO)',
        trigger=_rx(r'\b(zustellung|bescheid|verwaltungsakt|widerspruch)\b'),
        jurisdictions=('DE',),
        add_months=1,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W
    ),
    DeadlineTemplate(
        id_suffix='berufung-zpo-517',
        title='Berufungsfrist (§ 517 ZPO)',
        trigger=_rx(r'\b(urteil\s+zugestellt|berufung)\b'),
        jurisdictions=('DE',),
        add_months=1,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W
    ),
    DeadlineTemplate(
        id_suffix='berufungsbegruendung-zpo-520',
        title='Berufungsbegründung (§ 520 Abs. 2 ZPO)',
        trigger=_rx(r'\b(berufungsbegründung|berufung\s+begründ)\b'),
        jurisdictions=('DE',),
        add_months=2,
        priority='high',
        reminder_offsets_in_minutes=_REMIND_2W
    ),
    DeadlineTemplate(
        id_suffix='einspruch-mahnbescheid-zpo-692',
        title='Einspruchsfrist Mahnbescheid (§ 692 ZPO)',
        trigger=_rx(r'\b(mahnbescheid|einspruch)\b'),
        base_event_hints=(_SERVICE_HINT, _rx(r'\bmahnbescheid\b')),
        jurisdictions=('DE',),
        add_days=14,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_3D
    ),
    DeadlineTemplate(
        id_suffix='einspruch-strafbefehl-stpo-410',
        title='Einspruchsfrist Strafbefehl (§ 410 StPO)',
        trigger=_rx(r'\b(strafbefehl|einspruch)\b'),
        base_event_hints=(_SERVICE_HINT, _rx(r'\bstrafbefehl\b')),
        jurisdictions=('DE',),
        add_days=14,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_3D
    ),
    DeadlineTemplate(
        id_suffix='fortfuehrungsantrag-stpo-172',
        title='Fortführungsantrag prüfen (§ 172 StPO)',
        trigger=_rx(
            r'\b(fortführungsantrag|fortfuehrungsantrag|klageerzwingungsverfahren'
            r'|einstellung\s+des\s+verfahrens)\b'
        ),
        base_event_hints=(
            _rx(r'\b(bescheid|mitteilung|zustellung|zugestellt|bekanntgabe|erhalten)\b'),
            _rx(r'\b(einstellung|einstellungsbescheid)\b')
        ),
        jurisdictions=('DE',),
        add_days=14,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_3D
    ),
    DeadlineTemplate(
        id_suffix='kuendigungsschutz-klage-kschg-4',
        title='Klagefrist Kündigungsschutz (§ 4 KSchG)',
        trigger=_rx(r'\b(kündigung|arbeitsverhältnis\s+beendet|kündigungsschutz)\b'),
        jurisdictions=('DE',),
        add_days=21,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W_SHORT
    ),

    # Österreich (AT)
    DeadlineTemplate(
        id_suffix='berufung-zpo-at-464',
        title='Berufungsfrist AT (§ 464 ZPO-AT)',
        trigger=_rx(r'\b(urteil\s+zugestellt|berufung|österreich|at)\b'),
        jurisdictions=('AT',),
        add_days=28,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W
    ),
    DeadlineTemplate(
        id_suffix='rekurs-zpo-at-521',
        title='Rekursfrist AT (§ 521 ZPO-AT)',
        trigger=_rx(r'\b(beschluss\s+zugestellt|rekurs)\b'),
        jurisdictions=('AT',),
        add_days=14,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_3D
    ),
    DeadlineTemplate(
        id_suffix='revision-zpo-at-505',
        title='Revisionsfrist AT (§ 505 ZPO-AT)',
        trigger=_rx(r'\b(revision|revisionsfrist|ogh)\b'),
        jurisdictions=('AT',),
        add_days=28,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W_SHORT
    ),
    DeadlineTemplate(
        id_suffix='widerspruch-avg-63',
        title='Berufungsfrist Bescheid AT (§ 63 AVG)',
        trigger=_rx(r'\b(bescheid|verwaltungsbehörde|avg|berufung\s+gegen\s+bescheid)\b'),
        jurisdictions=('AT',),
        add_days=14,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_3D
    ),
    DeadlineTemplate(
        id_suffix='verjaehrung-abgb-1489',
        title='Verjährungsprüfung AT (§ 1489 ABGB)',
        trigger=_rx(r'\b(verjährung|abgb|schadenersatz\s+österreich|kenntnis\s+schaden)\b'),
        jurisdictions=('AT',),
        add_months=36,
        priority='high',
        reminder_offsets_in_minutes=_REMIND_4W
    ),
    DeadlineTemplate(
        id_suffix='mahnklage-at',
        title='Einspruchsfrist Zahlungsbefehl AT',
        trigger=_rx(r'\b(zahlungsbefehl|mahnklage|einspruch\s+gegen\s+zahlungsbefehl)\b'),
        jurisdictions=('AT',),
        add_days=28,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W_SHORT
    ),

    # Schweiz (CH)
    DeadlineTemplate(
        id_suffix='berufung-zpo-ch-311',
        title='Berufungsfrist CH (Art. 311 ZPO-CH)',
        trigger=_rx(r'\b(berufung|urteil\s+zugestellt|schweiz|ch|bundesgericht)\b'),
        jurisdictions=('CH',),
        add_days=30,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W
    ),
    DeadlineTemplate(
        id_suffix='beschwerde-zpo-ch-321',
        title='Beschwerdefrist CH (Art. 321 ZPO-CH)',
        trigger=_rx(r'\b(beschwerde|entscheid\s+zugestellt|verfügung\s+zugestellt)\b'),
        jurisdictions=('CH',),
        add_days=30,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W_SHORT
    ),
    DeadlineTemplate(
        id_suffix='einsprache-schkg-ch-74',
        title='Rechtsvorschlag CH (Art. 74 SchKG)',
        trigger=_rx(r'\b(zahlungsbefehl|rechtsvorschlag|betreibung|schkg)\b'),
        jurisdictions=('CH',),
        add_days=10,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_3D
    ),
    DeadlineTemplate(
        id_suffix='beschwerde-bgg-ch-100',
        title='Beschwerde ans Bundesgericht CH (Art. 100 BGG)',
        trigger=_rx(r'\b(bundesgericht|bgg|letztinstanzlich|beschwerde\s+in\s+zivilsachen)\b'),
        jurisdictions=('CH',),
        add_days=30,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W_SHORT
    ),
    DeadlineTemplate(
        id_suffix='verjaehrung-or-ch-127',
        title='Verjährungsprüfung CH (Art. 127 OR)',
        trigger=_rx(r'\b(verjährung|or\s+127|obligationenrecht|schweizer\s+recht)\b'),
        jurisdictions=('CH',),
        add_months=120,
        priority='high',
        reminder_offsets_in_minutes=_REMIND_4W_SHORT
    ),

    # Frankreich (FR)
    DeadlineTemplate(
        id_suffix='appel-cpc-fr-538',
        title="Délai d'appel FR (Art. 538 CPC)",
        trigger=_rx(r"\b(appel|jugement\s+signifié|tribunal\s+judiciaire|cour\s+d'appel|france|fr)\b"),
        jurisdictions=('FR',),
        add_months=1,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W
    ),
    DeadlineTemplate(
        id_suffix='pourvoi-cassation-fr',
        title='Pourvoi en cassation FR (Art. 612 CPC)',
        trigger=_rx(r'\b(cassation|pourvoi|cour\s+de\s+cassation)\b'),
        jurisdictions=('FR',),
        add_months=2,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_2W
    ),
    DeadlineTemplate(
        id_suffix='opposition-injonction-fr',
        title='Opposition à injonction de payer FR (Art. 1416 CPC)',
        trigger=_rx(r'\b(injonction\s+de\s+payer|opposition|ordonnance\s+portant\s+injonction)\b'),
        jurisdictions=('FR',),
        add_months=1,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W_SHORT
    ),
    DeadlineTemplate(
        id_suffix='prescription-cc-fr-2224',
        title='Prescription quinquennale FR (Art. 2224 CC)',
        trigger=_rx(r'\b(prescription|code\s+civil|responsabilité\s+civile|droit\s+français)\b'),
        jurisdictions=('FR',),
        add_months=60,
        priority='high',
        reminder_offsets_in_minutes=_REMIND_4W_SHORT
    ),

    # Italien (IT)
    DeadlineTemplate(
        id_suffix='appello-cpc-it-325',
        title='Termine di appello IT (Art. 325 CPC-IT)',
        trigger=_rx(r'\b(appello|sentenza\s+notificata|tribunale|italia|it)\b'),
        jurisdictions=('IT',),
        add_days=30,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W
    ),
    DeadlineTemplate(
        id_suffix='ricorso-cassazione-it-325',
        title='Ricorso per cassazione IT (Art. 325 CPC-IT)',
        trigger=_rx(r'\b(cassazione|ricorso|corte\s+suprema)\b'),
        jurisdictions=('IT',),
        add_days=60,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_2W
    ),

    # Polen (PL)
    DeadlineTemplate(
        id_suffix='apelacja-kpc-pl-369',
        title='Termin apelacji PL (Art. 369 KPC)',
        trigger=_rx(r'\b(apelacja|wyrok|sąd\s+okręgowy|polska|pl)\b'),
        jurisdictions=('PL',),
        add_days=14,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_3D
    ),
    DeadlineTemplate(
        id_suffix='sprzeciw-nakaz-pl',
        title='Sprzeciw od nakazu zapłaty PL',
        trigger=_rx(r'\b(nakaz\s+zapłaty|sprzeciw|postępowanie\s+nakazowe)\b'),
        jurisdictions=('PL',),
        add_days=14,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_3D
    ),

    # Portugal (PT)
    DeadlineTemplate(
        id_suffix='recurso-cpc-pt-638',
        title='Prazo de recurso PT (Art. 638 CPC-PT)',
        trigger=_rx(r'\b(recurso|sentença\s+notificada|tribunal|portugal|pt)\b'),
        jurisdictions=('PT',),
        add_days=30,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_1W
    ),

    # EU / EGMR
    DeadlineTemplate(
        id_suffix='egmr-beschwerde-art35',
        title='EGMR-Individualbeschwerde (Art. 35 EMRK)',
        trigger=_rx(r'\b(egmr|menschenrecht|emrk|echr|european\s+court|individualbeschwerde)\b'),
        jurisdictions=('ECHR',),
        add_months=4,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_4W
    ),
    DeadlineTemplate(
        id_suffix='eugh-nichtigkeitsklage-art263',
        title='EuGH-Nichtigkeitsklage (Art. 263 AEUV)',
        trigger=_rx(r'\b(eugh|nichtigkeitsklage|aeuv|gerichtshof\s+der\s+eu|europäischer\s+gerichtshof)\b'),
        jurisdictions=('EU',),
        add_months=2,
        priority='critical',
        reminder_offsets_in_minutes=_REMIND_2W
    ),
)


def template_matches_jurisdiction(template: DeadlineTemplate,
                                  detected_jurisdiction: Optional[str] = None) -> bool:
    """
    Decide whether a template may apply to a document

    Documents without a detected jurisdiction accept every template. EU and
    ECHR templates stay available in national cases.
    """
    if not detected_jurisdiction:
        return True

    if detected_jurisdiction in template.jurisdictions:
        return True

    return any(code in template.jurisdictions for code in OVERLAY_JURISDICTIONS)


def priority_score(priority: str) -> int:
    return PRIORITY_SCORES.get(priority, 0)


def match_templates(text: str,
                    detected_jurisdiction: Optional[str] = None,
                    templates: Sequence[DeadlineTemplate] = DEADLINE_TEMPLATES,
                    limit: int = MAX_AUTO_DEADLINES_PER_DOC) -> List[DeadlineTemplate]:
    """
    Select the templates that apply to a document

    Args:
        text: Document text (already truncated)
        detected_jurisdiction: Jurisdiction code from ingestion, if any
        templates: Registry to match against
        limit: Maximum number of templates per document

    Returns:
        Matching templates, highest priority first, registry order on ties
    """

    matched = [
        template for template in templates
        if template_matches_jurisdiction(template, detected_jurisdiction)
        and template.trigger.search(text)
    ]

    # sorted() is stable, so registry order survives within a priority
    matched = sorted(matched, key=lambda template: priority_score(template.priority), reverse=True)
    return matched[:limit]


def get_template(id_suffix: str) -> DeadlineTemplate:
    for template in DEADLINE_TEMPLATES:
        if template.id_suffix == id_suffix:
            return template
    raise KeyError(f"Unknown deadline template: {id_suffix}")
