# statement_helper/controllers/categorizer.py
"""
Pattern-based transaction categorizer.

``CATEGORY_RULES`` is ordered: the first matching pattern wins, so specific
merchant patterns sit ahead of generic ones. The first ``INCOME_RULE_COUNT``
rules are the only ones tried for income.
"""

from __future__ import annotations

import logging
import re
from typing import Final, Iterable, List, NamedTuple, Tuple

from statement_helper.data_model import UNCATEGORIZED, Transaction, TransactionType

log = logging.getLogger(__name__)

OTHER_INCOME: Final[str] = "Other Income"
OTHER_EXPENSE: Final[str] = "Other"
INCOME_RULE_COUNT: Final[int] = 5


class CategoryRule(NamedTuple):
    category: str
    patterns: Tuple[re.Pattern[str], ...]


def _rule(category: str, *patterns: str) -> CategoryRule:
    return CategoryRule(category, tuple(re.compile(p, re.IGNORECASE) for p in patterns))


CATEGORY_RULES: Final[Tuple[CategoryRule, ...]] = (
    # region Income
    _rule("Salary", r"payroll", r"salary", r"direct deposit", r"employer"),
    _rule("Bonus", r"bonus", r"incentive"),
    _rule("Interest", r"interest (payment|earned|credit)", r"apy"),
    _rule("Dividends", r"dividend"),
    _rule("Refunds", r"refund", r"rebate", r"cashback"),
    # endregion Income
    _rule(
        "Groceries",
        r"trader joe", r"whole foods", r"safeway", r"kroger", r"publix",
        r"albertsons", r"food coop", r"grocery", r"costco", r"sam'?s club",
        r"aldi", r"wegmans", r"h-?e-?b", r"target.*grocery", r"walmart.*grocery",
        r"sprouts", r"fresh market", r"food mart", r"supermarket",
    ),
    _rule(
        "Restaurants & Dining",
        r"restaurant", r"doordash", r"uber ?eats", r"grubhub", r"postmates",
        r"chipotle", r"mcdonald", r"starbucks", r"dunkin", r"subway",
        r"pizza", r"burger", r"cafe", r"coffee", r"diner", r"grill",
        r"sweetgreen", r"chick-?fil-?a", r"panera", r"wendy", r"taco bell",
        r"kfc", r"popeyes", r"five guys", r"shake shack", r"panda express",
    ),
    _rule(
        "Subscriptions",
        r"netflix", r"spotify", r"hulu", r"disney\+", r"hbo ?max",
        r"apple ?(music|tv|one|arcade)", r"amazon prime", r"youtube",
        r"paramount", r"peacock", r"audible", r"kindle", r"nytimes",
        r"subscription", r"membership", r"monthly fee",
    ),
    _rule(
        "Software & Services",
        r"openai", r"anthropic", r"claude", r"chatgpt", r"cursor",
        r"github", r"gitlab", r"aws", r"azure", r"google cloud",
        r"digitalocean", r"heroku", r"vercel", r"netlify", r"cloudflare",
        r"notion", r"figma", r"canva", r"adobe", r"microsoft 365",
        r"dropbox", r"slack", r"zoom", r"calendly", r"zapier",
        r"replicate", r"elevenlabs", r"midjourney", r"runway",
        r"tradingview", r"webflow", r"airtable", r"hubspot",
    ),
    _rule(
        "Utilities",
        r"electric", r"gas co", r"water (bill|utility)", r"sewage",
        r"con ?ed", r"pge", r"duke energy", r"xcel", r"utility",
        r"power company", r"national grid",
    ),
    _rule(
        "Internet & Cable",
        r"comcast", r"xfinity", r"spectrum", r"verizon fios", r"att.*internet",
        r"t-?mobile.*home", r"cox", r"frontier", r"optimum", r"cable",
        r"internet service", r"broadband",
    ),
    _rule(
        "Phone",
        r"verizon wireless", r"t-?mobile", r"att.*wireless", r"sprint",
        r"at&t", r"cricket", r"metro ?pcs", r"mint mobile", r"visible",
        r"google fi", r"phone bill", r"cell(ular)?",
    ),
    _rule(
        "Insurance",
        r"insurance", r"geico", r"progressive", r"state farm", r"allstate",
        r"liberty mutual", r"nationwide", r"usaa", r"aetna", r"cigna",
        r"blue cross", r"united health", r"kaiser", r"anthem",
    ),
    _rule(
        "Transportation",
        r"uber(?! ?eats)", r"lyft", r"taxi", r"cab\b", r"mta", r"metro",
        r"transit", r"subway", r"bus pass", r"parking", r"garage",
        r"toll", r"e-?zpass",
    ),
    _rule(
        "Gas",
        r"shell", r"chevron", r"exxon", r"mobil", r"bp\b", r"arco",
        r"76\b", r"texaco", r"gas station", r"fuel", r"petroleum",
        r"speedway", r"wawa.*gas", r"costco.*gas",
    ),
    _rule(
        "Shopping",
        r"amazon(?!.*prime)", r"walmart", r"target", r"best buy", r"home depot",
        r"lowes", r"ikea", r"wayfair", r"bed bath", r"macy", r"nordstrom",
        r"tj ?maxx", r"marshalls", r"ross", r"kohls", r"jc ?penney",
        r"gap", r"old navy", r"h&m", r"zara", r"uniqlo", r"nike", r"adidas",
        r"apple store", r"etsy", r"ebay",
    ),
    _rule(
        "Health & Medical",
        r"pharmacy", r"cvs", r"walgreens", r"rite aid", r"hospital",
        r"clinic", r"medical", r"doctor", r"dentist", r"optom",
        r"urgent care", r"quest diag", r"labcorp", r"prescription",
    ),
    _rule(
        "Fitness",
        r"gym", r"fitness", r"planet fitness", r"equinox", r"crunch",
        r"24 hour fitness", r"la fitness", r"orangetheory", r"crossfit",
        r"peloton", r"yoga", r"pilates",
    ),
    _rule(
        "Entertainment",
        r"movie", r"cinema", r"amc", r"regal", r"theater", r"theatre",
        r"concert", r"ticketmaster", r"stubhub", r"eventbrite",
        r"museum", r"zoo", r"amusement", r"bowling", r"arcade",
        r"steam", r"playstation", r"xbox", r"nintendo", r"gaming",
    ),
    _rule(
        "Travel",
        r"airline", r"united", r"delta", r"american air", r"southwest",
        r"jetblue", r"spirit", r"frontier", r"alaska air", r"flight",
        r"hotel", r"marriott", r"hilton", r"hyatt", r"airbnb", r"vrbo",
        r"expedia", r"booking\.com", r"kayak", r"hopper", r"priceline",
    ),
    _rule(
        "Loans",
        r"student loan", r"dept.*education", r"fedloan", r"nelnet",
        r"navient", r"mortgage", r"car payment", r"auto loan",
        r"personal loan", r"sofi", r"lending club", r"credit card payment",
    ),
    _rule("Rent", r"rent", r"landlord", r"property management", r"apartment"),
    _rule(
        "Transfers",
        r"transfer", r"venmo", r"zelle", r"paypal", r"cash ?app",
        r"wire", r"ach.*transfer",
    ),
    _rule("ATM/Cash", r"atm", r"cash withdrawal", r"cash advance"),
    _rule(
        "Fees",
        r"fee", r"charge", r"overdraft", r"nsf", r"service charge",
        r"monthly maintenance", r"atm fee", r"foreign transaction",
    ),
)

INCOME_RULES: Final[Tuple[CategoryRule, ...]] = CATEGORY_RULES[:INCOME_RULE_COUNT]


def _first_match(description: str, rules: Iterable[CategoryRule]) -> str | None:
    for rule in rules:
        for pattern in rule.patterns:
            if pattern.search(description):
                return rule.category
    return None


def categorize_transaction(txn: Transaction) -> str:
    """
    Return the category ``txn`` should carry.

    An existing category other than ``Uncategorized`` is kept as is.
    """
    if txn.category and txn.category != UNCATEGORIZED:
        return txn.category

    description = txn.description.lower()
    if txn.type is TransactionType.INCOME:
        return _first_match(description, INCOME_RULES) or OTHER_INCOME
    return _first_match(description, CATEGORY_RULES) or OTHER_EXPENSE


def categorize_all(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Copy of ``transactions`` with every category filled in."""
    out: List[Transaction] = []
    changed = 0
    for txn in transactions:
        category = categorize_transaction(txn)
        if category != txn.category:
            changed += 1
            txn = txn.with_changes(category=category)
        out.append(txn)
    log.debug("Categorized %d of %d transactions", changed, len(out))
    return out
