"""
Deterministic extraction rules.

This file exists to make the column contract and normalization tables explicit.
"""

TARGET_REP = "Mata"

# logical field -> header text
COLUMN_NAMES = {
    "month": "Month",
    "customer": "Customer",
    "rep": "Rep",
    "setup_fee": "Setup Fee",
    "subscription": "Subscription Amount",
    "billing_cycle": "Billing Cycle",
}

# Probe order matters: exact close-date names before the generic "Date".
CLOSE_DATE_ALIASES = ("Close Date", "Closed Date", "Date Closed", "Date")

MONTH_NAMES = {
    "january": "01", "jan": "01",
    "february": "02", "feb": "02",
    "march": "03", "mar": "03",
    "april": "04", "apr": "04",
    "may": "05",
    "june": "06", "jun": "06",
    "july": "07", "jul": "07",
    "august": "08", "aug": "08",
    "september": "09", "sep": "09", "sept": "09",
    "october": "10", "oct": "10",
    "november": "11", "nov": "11",
    "december": "12", "dec": "12",
}

CYCLE_MONTHLY = "monthly"
CYCLE_SIX_MONTH = "six-month"
CYCLE_YEARLY = "yearly"
CYCLE_TWO_YEAR = "two-year"

SOURCE_ENCODING_FALLBACK = "utf-8"
SNIFF_DELIMITERS = [",", ";", "\t", "|"]
