"""
Deadline Calculator
Due-date arithmetic for derived deadlines and jurisdiction-aware rule calculation
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import holidays
from dateutil.relativedelta import relativedelta

from .models import parse_iso, to_iso

logger = logging.getLogger(__name__)


def add_duration(base: datetime, add_days: int = 0, add_months: int = 0) -> datetime:
    """
    Add a statutory duration to a base date

    Months are applied first, then days. A day of month missing in the target
    month rolls over into the next one (31.01. + 1 month = 03.03., or 02.03.
    in leap years; 31.03. + 1 month = 01.05.).
    """

    result = base
    if add_months > 0:
        # step from the 1st so the overflow carries into the following month
        first_of_month = result.replace(day=1) + relativedelta(months=add_months)
        result = first_of_month + timedelta(days=result.day - 1)
    if add_days > 0:
        result = result + timedelta(days=add_days)
    return result


def normalize_to_business_day(date: datetime) -> datetime:
    """Move Saturday and Sunday due dates to the following Monday; holidays are not considered"""

    weekday = date.weekday()

    if weekday == 5:  # Saturday
        return date + timedelta(days=2)
    elif weekday == 6:  # Sunday
        return date + timedelta(days=1)

    return date


# Manual lookup rules: fixed day counts from a trigger date
DEADLINE_RULES: Dict[str, List[Dict]] = {
    'berufung_zpo': [
        {'label': 'Berufungsfrist', 'days_from_trigger': 30,
         'legal_basis': '§ 517 ZPO (1 Monat)'},
        {'label': 'Berufungsbegründungsfrist', 'days_from_trigger': 60,
         'legal_basis': '§ 520 Abs. 2 ZPO (2 Monate)'},
    ],
    'revision_zpo': [
        {'label': 'Revisionsfrist', 'days_from_trigger': 30,
         'legal_basis': '§ 548 ZPO (1 Monat)'},
        {'label': 'Revisionsbegründungsfrist', 'days_from_trigger': 60,
         'legal_basis': '§ 551 Abs. 2 ZPO (2 Monate)'},
    ],
    'widerspruch_mahnbescheid': [
        {'label': 'Widerspruchsfrist Mahnbescheid', 'days_from_trigger': 14,
         'legal_basis': '§ 694 ZPO (2 Wochen)'},
    ],
    'einspruch_versaeumnisurteil': [
        {'label': 'Einspruchsfrist Versäumnisurteil', 'days_from_trigger': 14,
         'legal_basis': '§ 339 Abs. 1 ZPO (2 Wochen)'},
    ],
    'klageerwiderung': [
        {'label': 'Klageerwiderungsfrist (Standard)', 'days_from_trigger': 14,
         'legal_basis': '§ 276 Abs. 1 ZPO (2 Wochen Notfrist)'},
    ],
    'beschwerde_stpo': [
        {'label': 'Beschwerdefrist', 'days_from_trigger': 7,
         'legal_basis': '§ 311 Abs. 2 StPO (1 Woche)'},
    ],
    'berufung_stpo': [
        {'label': 'Berufungsfrist Strafrecht', 'days_from_trigger': 7,
         'legal_basis': '§ 314 StPO (1 Woche)'},
    ],
    'widerspruch_verwaltungsakt': [
        {'label': 'Widerspruchsfrist Verwaltungsakt', 'days_from_trigger': 30,
         'legal_basis': '§ 70 VwGO (1 Monat)'},
    ],
    'klage_vwgo': [
        {'label': 'Klagefrist VwGO', 'days_from_trigger': 30,
         'legal_basis': '§ 74 VwGO (1 Monat)'},
    ],
    'kuendigungsschutzklage': [
        {'label': 'Kündigungsschutzklage', 'days_from_trigger': 21,
         'legal_basis': '§ 4 KSchG (3 Wochen)'},
    ],
    'berufung_ogh_at': [
        {'label': 'Berufungsfrist Österreich', 'days_from_trigger': 28,
         'legal_basis': '§ 464 Abs. 1 öZPO (4 Wochen)'},
    ],
    'revision_ogh_at': [
        {'label': 'Revisionsfrist Österreich', 'days_from_trigger': 28,
         'legal_basis': '§ 505 Abs. 2 öZPO (4 Wochen)'},
    ],
}

DEFAULT_JURISDICTION = 'DE'
MAX_ROLL_FORWARD_DAYS = 10


class LegalDeadlineCalculator:
    """
    Calculates deadlines for a known deadline type from an explicit trigger date
    Rolls due dates past weekends and public holidays (§ 222 ZPO)
    """

    def __init__(self, years: Optional[range] = None):
        """
        Initialize holiday calendars

        Args:
            years: Years to preload; calendars expand lazily for other years
        """

        if years is None:
            current_year = datetime.now().year
            years = range(current_year - 1, current_year + 3)

        self.holiday_calendars = {
            'DE': holidays.country_holidays('DE', years=years),
            'AT': holidays.country_holidays('AT', years=years)
        }

        logger.info(f"Deadline calculator initialized with calendars: {sorted(self.holiday_calendars)}")

    def calculate(self,
                  jurisdiction: Optional[str],
                  trigger_date: str,
                  deadline_type: str) -> Dict:
        """
        Calculate all deadlines of a deadline type

        Args:
            jurisdiction: Jurisdiction code, defaults to DE
            trigger_date: ISO date or instant of the triggering event
            deadline_type: Key of DEADLINE_RULES

        Returns:
            Dictionary with 'ok' and either the deadlines or an error
        """

        rules = DEADLINE_RULES.get(deadline_type)
        if not rules:
            return {
                'ok': False,
                'error': f"Unknown deadline type: {deadline_type}",
                'available_types': list(DEADLINE_RULES)
            }

        jurisdiction = (jurisdiction or DEFAULT_JURISDICTION).upper()
        holiday_calendar = self.holiday_calendars.get(
            jurisdiction, self.holiday_calendars[DEFAULT_JURISDICTION]
        )

        try:
            trigger = parse_iso(trigger_date)
        except (TypeError, ValueError):
            logger.warning(f"Invalid trigger date: {trigger_date!r}")
            return {'ok': False, 'error': 'Invalid trigger date.'}

        results = []
        for rule in rules:
            unadjusted = trigger + timedelta(days=rule['days_from_trigger'])
            target = self._extend_past_non_business_days(unadjusted, holiday_calendar)

            results.append({
                'label': rule['label'],
                'legal_basis': rule['legal_basis'],
                'trigger_date': trigger_date,
                'days_from_trigger': rule['days_from_trigger'],
                'calculated_date': target.date().isoformat(),
                'calculated_date_iso': to_iso(target),
                'adjusted_for_weekend_or_holiday': target != unadjusted
            })

        return {
            'ok': True,
            'jurisdiction': jurisdiction,
            'deadline_type': deadline_type,
            'trigger_date': trigger_date,
            'deadlines': results
        }

    def get_available_types(self) -> List[Dict]:
        return [
            {
                'type': key,
                'label': rules[0]['label'] if rules else key,
                'deadline_count': len(rules)
            }
            for key, rules in DEADLINE_RULES.items()
        ]

    def _extend_past_non_business_days(self, date: datetime, holiday_calendar) -> datetime:
        """Extend deadline past weekends and holidays, at most ten days"""

        result = date
        for _ in range(MAX_ROLL_FORWARD_DAYS):
            if result.weekday() >= 5 or result.date() in holiday_calendar:
                result += timedelta(days=1)
            else:
                break
        return result
