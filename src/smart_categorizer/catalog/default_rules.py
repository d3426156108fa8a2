"""Built-in rules for common Czech merchants, utilities and services.

The catalog is plain data; swap it for another locale by passing a
different rule list to the engine.
"""
from smart_categorizer.models import CategorizationRule, RuleType

C = RuleType.CONTAINS
R = RuleType.REGEX

SYSTEM_RULE_PREFIX = "default_"

# (category_id, base priority, [(id, display name, rule type, pattern, priority delta)])
_CATALOG: tuple[tuple[str, int, list[tuple[str, str, RuleType, str, int]]], ...] = (
    ("cat_groceries", 50, [
        ("albert", "Albert", C, "albert", 0),
        ("billa", "Billa", C, "billa", 0),
        ("lidl", "Lidl", C, "lidl", 0),
        ("kaufland", "Kaufland", C, "kaufland", 0),
        ("tesco", "Tesco", C, "tesco", 0),
        ("penny", "Penny Market", C, "penny", 0),
        ("globus", "Globus", C, "globus", 0),
        ("makro", "Makro", C, "makro", 0),
        ("coop", "COOP", C, "coop", -5),
        ("cba", "CBA", C, "cba premiant", -5),
        ("rohlik", "Rohlík.cz", C, "rohlik", 0),
        ("kosik", "Košík.cz", C, "kosik", 0),
    ]),
    ("cat_dining", 50, [
        ("uber_eats", "Uber Eats", C, "uber eats", 5),
        ("uber_eats2", "Uber Eats", C, "uber *eats", 5),
        ("wolt", "Wolt", C, "wolt", 0),
        ("bolt_food", "Bolt Food", C, "bolt food", 5),
        ("damejidlo", "Dáme jídlo", C, "damejidlo", 0),
        ("foodora", "Foodora", C, "foodora", 0),
        ("mcdonalds", "McDonald's", C, "mcdonald", 0),
        ("burger_king", "Burger King", C, "burger king", 0),
        ("kfc", "KFC", C, "kfc", 0),
        ("subway", "Subway", C, "subway", 0),
        ("starbucks", "Starbucks", C, "starbucks", 0),
        ("costa", "Costa Coffee", C, "costa coffee", 0),
        ("potrefena_husa", "Potrefená husa", C, "potrefena husa", 0),
        ("lokal", "Lokál", C, "lokal u", 0),
        ("kolkovna", "Kolkovna", C, "kolkovna", 0),
        ("kantyna", "Kantýna", C, "kantyna", -5),
        ("jidelna", "Jídelna", C, "jidelna", -5),
        ("bistro", "Bistro", C, "bistro", -5),
        ("bufet", "Bufet", C, "bufet", -5),
        ("restaurace", "Restaurace", R, r"(?i)restaurace|restaurant|pizzeri", -10),
    ]),
    ("cat_transport", 50, [
        ("dpp", "DPP", C, "dpp", 0),
        ("litacka", "Lítačka", C, "litacka", 0),
        ("pid", "PID", C, "pid", -5),
        ("cd", "České dráhy", R, r"(?i)ceske\s*drahy|cd\.cz", 0),
        ("regiojet", "RegioJet", C, "regiojet", 0),
        ("student_agency", "Student Agency", C, "student agency", 0),
        ("leo_express", "Leo Express", C, "leo express", 0),
        ("flixbus", "FlixBus", C, "flixbus", 0),
        ("uber", "Uber", R, r"(?i)\buber\b", -5),
        ("bolt", "Bolt", C, "bolt.eu", 0),
        ("liftago", "Liftago", C, "liftago", 0),
        ("benzina", "Benzina", C, "benzina", 0),
        ("shell", "Shell", C, "shell", 0),
        ("omv", "OMV", C, "omv", 0),
        ("mol", "MOL", C, "mol", -5),
        ("orlen", "Orlen", C, "orlen", 0),
        ("eurooil", "EuroOil", C, "eurooil", 0),
        ("euro_oil", "Euro Oil", C, "euro oil", 0),
        ("tank_ono", "Tank ONO", C, "tank ono", 0),
        ("dalnice", "Dálniční známka", C, "dalnic", 0),
        ("parking", "Parking", C, "parking", -5),
        ("parkovne", "Parkovné", C, "parkov", -5),
        ("nextbike", "Nextbike", C, "nextbike", 0),
        ("lime", "Lime", R, r"(?i)\blime\b", -5),
        ("rekola", "Rekola", C, "rekola", 0),
    ]),
    ("cat_utilities", 50, [
        ("cez", "ČEZ", C, "cez", 0),
        ("pre", "PRE", C, "pre ", -5),
        ("eon", "E.ON", C, "e.on", 0),
        ("innogy", "innogy", C, "innogy", 0),
        ("pp", "Pražská plynárenská", C, "plynarenska", 0),
        ("pvk", "PVK", C, "pvk", 0),
        ("vodovody", "Vodovody", C, "vodovod", 0),
        ("tmobile", "T-Mobile", C, "t-mobile", 0),
        ("o2", "O2", C, "o2 czech", 0),
        ("vodafone", "Vodafone", C, "vodafone", 0),
        ("upc", "UPC", C, "upc", 0),
        ("ceska_posta", "Česká pošta", C, "ceska posta", -5),
        ("balikovna", "Balíkovna", C, "balikovna", -5),
        ("ppl", "PPL", R, r"(?i)\bppl\b", -5),
        ("dpd", "DPD", R, r"(?i)\bdpd\b", -5),
        ("gls", "GLS", R, r"(?i)\bgls\b", -5),
        ("zasilkovna", "Zásilkovna", C, "zasilkovna", -5),
        ("packeta", "Packeta", C, "packeta", -5),
    ]),
    ("cat_entertainment", 50, [
        ("netflix", "Netflix", C, "netflix", 0),
        ("spotify", "Spotify", C, "spotify", 0),
        ("apple_music", "Apple", C, "apple.com/bill", 0),
        ("hbo", "HBO Max", C, "hbo", 0),
        ("disney", "Disney+", C, "disney", 0),
        ("youtube", "YouTube Premium", C, "youtube", 0),
        ("voyo", "VOYO", C, "voyo", 0),
        ("steam", "Steam", C, "steam", 0),
        ("playstation", "PlayStation", C, "playstation", 0),
        ("xbox", "Xbox", C, "xbox", 0),
        ("epic", "Epic Games", C, "epic games", 0),
        ("cinema_city", "Cinema City", C, "cinema city", 0),
        ("cinestar", "CineStar", C, "cinestar", 0),
        ("ticketmaster", "Ticketmaster", C, "ticketmaster", 0),
        ("ticketportal", "Ticketportal", C, "ticketportal", 0),
        ("goout", "GoOut", C, "goout", 0),
    ]),
    ("cat_shopping", 50, [
        ("alza", "Alza.cz", C, "alza", 0),
        ("datart", "Datart", C, "datart", 0),
        ("czc", "CZC.cz", C, "czc", 0),
        ("mall", "Mall.cz", C, "mall.cz", 0),
        ("amazon", "Amazon", C, "amazon", 0),
        ("ebay", "eBay", C, "ebay", 0),
        ("aliexpress", "AliExpress", C, "aliexpress", 0),
        ("zalando", "Zalando", C, "zalando", 0),
        ("zara", "Zara", R, r"(?i)\bzara\b", 0),
        ("hm", "H&M", C, "h&m", 0),
        ("reserved", "Reserved", C, "reserved", -5),
        ("decathlon", "Decathlon", C, "decathlon", 0),
        ("sportisimo", "Sportisimo", C, "sportisimo", 0),
        ("ikea", "IKEA", C, "ikea", 0),
        ("jysk", "JYSK", C, "jysk", 0),
        ("dm", "dm drogerie", C, "dm drogerie", 0),
        ("rossmann", "Rossmann", C, "rossmann", 0),
        ("teta", "Teta drogerie", C, "teta drogerie", 0),
        ("notino", "Notino", C, "notino", 0),
    ]),
    ("cat_health", 50, [
        ("lekarna", "Lékárna", C, "lekarna", 0),
        ("dr_max", "Dr.Max", R, r"(?i)dr\.?\s*max", 0),
        ("benu", "BENU", R, r"(?i)\bbenu\b", 0),
        ("pilulka", "Pilulka", C, "pilulka", 0),
        ("nemocnice", "Nemocnice", C, "nemocnice", 0),
        ("poliklinika", "Poliklinika", C, "poliklinik", 0),
        ("zubar", "Zubař", R, r"(?i)zubar|stomatolog|dental", 0),
        ("optika", "Optika", C, "optik", -5),
        ("fitness", "Fitness", R, r"(?i)fitness|posilovna|\bgym\b", -5),
    ]),
    ("cat_travel", 50, [
        ("booking", "Booking.com", C, "booking.com", 0),
        ("airbnb", "Airbnb", C, "airbnb", 0),
        ("ryanair", "Ryanair", C, "ryanair", 0),
        ("wizzair", "Wizz Air", R, r"(?i)wizz\s*air", 0),
        ("smartwings", "Smartwings", C, "smartwings", 0),
        ("czech_airlines", "Czech Airlines", C, "czech airlines", 0),
        ("letiste", "Letiště Praha", C, "letiste", -5),
        ("hotel", "Hotel", C, "hotel", -10),
        ("invia", "Invia", C, "invia", 0),
        ("cedok", "Čedok", C, "cedok", 0),
        ("kiwi", "Kiwi.com", C, "kiwi.com", 0),
    ]),
    ("cat_income", 60, [
        ("mzda", "Mzda", R, r"(?i)\bmzda\b|\bvyplata\b|\bplat\b", 0),
        ("vyplata", "Výplata", C, "vyplata", 0),
        ("stravenky", "Stravenky", C, "stravenkovy", 0),
        ("cssz", "ČSSZ", C, "cssz", 0),
        ("duchod", "Důchod", C, "duchod", 0),
        ("vratka", "Vrátka", C, "vratka", -5),
        ("dobropis", "Dobropis", C, "dobropis", -5),
    ]),
    ("cat_investments", 60, [
        ("degiro", "DEGIRO", C, "degiro", 0),
        ("xtb", "XTB", C, "xtb", 0),
        ("portu", "Portu", C, "portu", 0),
        ("fondee", "Fondee", C, "fondee", 0),
        ("fio_ebroker", "Fio e-Broker", R, r"(?i)fio.*broker|e-broker", 0),
        ("lynx", "Lynx", C, "lynx", 0),
        ("interactive_brokers", "Interactive Brokers", C, "interactive brokers", 0),
        ("etoro", "eToro", C, "etoro", 0),
        ("trading212", "Trading 212", C, "trading 212", 0),
        ("revolut_trading", "Revolut Trading", R, r"(?i)revolut.*trad|revolut.*invest", 0),
        ("binance", "Binance", C, "binance", -5),
        ("coinbase", "Coinbase", C, "coinbase", -5),
        ("kraken", "Kraken", C, "kraken", -5),
    ]),
    ("cat_housing", 50, [
        ("najem", "Nájem", R, r"(?i)\bnajem|\bnajemne", 5),
        ("svj", "SVJ", R, r"(?i)\bsvj\b", 5),
        ("hornbach", "Hornbach", C, "hornbach", 0),
        ("obi", "OBI", R, r"(?i)\bobi\b", 0),
        ("baumax", "Baumax", C, "baumax", 0),
        ("bauhaus", "Bauhaus", C, "bauhaus", 0),
        ("uni_hobby", "Uni Hobby", C, "uni hobby", 0),
        ("mountfield", "Mountfield", C, "mountfield", 0),
        ("stavebniny", "Stavebniny", C, "stavebniny", -5),
        ("dek", "DEK Stavebniny", R, r"(?i)\bdek\b", -10),
        ("renovace", "Renovace", C, "renovac", 0),
        ("zahradnik", "Zahradník", C, "zahradn", -5),
        ("malir", "Malíř", R, r"(?i)malir|natěrač|naterac", -5),
        ("instalater", "Instalatér", R, r"(?i)instalat|topenář|topenar", -5),
        ("elektrikar", "Elektrikář", R, r"(?i)elektrik|elektromont", -5),
    ]),
    ("cat_taxes", 70, [
        # Czech tax offices bank with the CNB, bank code 0710.
        ("financni_urad_iban", "Finanční úřad (0710)", R, r"(?i)cz\d{2}0710|0710\d{10}|/0710$", 0),
        ("dan_keyword", "Daně", R, r"(?i)\bdan\b|dpfo|dpph|\bdph\b|financni\s*urad", -10),
    ]),
    ("cat_internal_transfers", 40, [
        # Fintech intermediaries (Revolut, Wise, N26) are left out: the merchant
        # behind them decides the category.
        ("vlastni_ucet", "Vlastní účet", C, "vlastni ucet", 0),
        ("prevod", "Převod", R, r"(?i)prevod.*ucet|mezi.*ucty", 0),
        ("vyber", "Výběr z bankomatu", R, r"(?i)vyber.*bankomat|atm.*vyber", 0),
        ("vklad", "Vklad", C, "vklad hotovost", 0),
        ("sporeni", "Spoření", C, "sporeni", 0),
        ("stav_sporeni", "Stavební spoření", C, "stavebni spor", 0),
    ]),
)


def get_default_rules() -> list[CategorizationRule]:
    return [
        CategorizationRule(
            id=f"{SYSTEM_RULE_PREFIX}{rule_id}",
            name=name,
            rule_type=rule_type,
            pattern=pattern,
            category_id=category_id,
            priority=base_priority + delta,
        )
        for category_id, base_priority, entries in _CATALOG
        for rule_id, name, rule_type, pattern, delta in entries
    ]


def default_category_ids() -> list[str]:
    return [category_id for category_id, _, _ in _CATALOG]
