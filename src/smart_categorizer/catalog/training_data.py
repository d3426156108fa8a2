"""Synthetic training corpus modelled on Czech bank statement descriptions.

Each merchant is expanded through a handful of statement templates so the
classifier sees the same names in the shapes banks actually print them.
"""
from collections import Counter
from collections.abc import Iterable

CARD_TEMPLATES = (
    "{name}",
    "{upper}",
    "Platba kartou {name}",
    "{upper} PRAHA",
    "{name} Brno",
    "{upper} OSTRAVA",
)

TRANSFER_TEMPLATES = (
    "{name}",
    "{upper}",
    "Prevod {name}",
    "Trvaly prikaz {name}",
)

_MERCHANTS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "cat_groceries": (
        ("Albert Hypermarket", "Albert Supermarket", "Billa", "Lidl", "Kaufland",
         "Tesco Stores", "Penny Market", "Globus", "Makro Cash Carry", "Rohlik.cz", "Kosik.cz"),
        ("nakup potravin", "potraviny a drogerie", "supermarket nakup", "ovoce zelenina trh",
         "pekarna rohliky", "reznictvi maso"),
    ),
    "cat_dining": (
        ("Uber Eats", "Wolt", "Bolt Food", "Foodora", "Damejidlo", "McDonalds", "Burger King",
         "KFC", "Starbucks", "Costa Coffee", "Potrefena Husa", "Kolkovna"),
        ("restaurace obed", "pizzerie veceře", "kavarna kava", "bistro obed menu",
         "rozvoz jidla", "hospoda pivo"),
    ),
    "cat_transport": (
        ("DPP Litacka", "Ceske drahy", "RegioJet", "Leo Express", "FlixBus", "Liftago",
         "Benzina", "Shell", "OMV", "Orlen", "Nextbike"),
        ("jizdenka vlak", "kupon mhd", "tankovani nafta", "dalnicni znamka",
         "parkovne centrum", "taxi jizda"),
    ),
    "cat_utilities": (
        ("CEZ Prodej", "Prazska energetika", "E.ON Energie", "innogy", "Prazska plynarenska",
         "Prazske vodovody", "T-Mobile", "O2 Czech Republic", "Vodafone", "UPC"),
        ("zaloha elektrina", "zaloha plyn", "vodne stocne", "mobilni tarif",
         "internet pripojeni", "vyuctovani energie"),
    ),
    "cat_entertainment": (
        ("Netflix", "Spotify", "HBO Max", "Disney Plus", "YouTube Premium", "Steam",
         "PlayStation Store", "Cinema City", "CineStar", "Ticketportal", "GoOut"),
        ("vstupenky koncert", "kino vstupenka", "predplatne streaming",
         "divadlo vstupenky", "hra steam nakup", "festival vstupne"),
    ),
    "cat_shopping": (
        ("Alza.cz", "Datart", "CZC.cz", "Mall.cz", "Amazon", "AliExpress", "Zalando",
         "Decathlon", "Sportisimo", "IKEA", "dm drogerie", "Rossmann", "Notino"),
        ("elektronika objednavka", "obleceni eshop", "boty nakup", "kosmetika eshop",
         "sportovni potreby", "nabytek objednavka"),
    ),
    "cat_health": (
        ("Lekarna Dr.Max", "BENU Lekarna", "Pilulka", "Nemocnice Motol", "Poliklinika Budejovicka",
         "Zubni ordinace", "Fitness Classic"),
        ("leky lekarna", "poplatek lekar", "stomatolog osetreni", "vitaminy lekarna",
         "ocni optika bryle", "rehabilitace fyzioterapie"),
    ),
    "cat_travel": (
        ("Booking.com", "Airbnb", "Ryanair", "Wizz Air", "Smartwings", "Invia", "Cedok",
         "Kiwi.com", "Hotel Hilton"),
        ("letenka praha", "ubytovani hotel", "zajezd dovolena", "cestovni pojisteni",
         "letiste parkovani", "apartman pronajem"),
    ),
    "cat_investments": (
        ("DEGIRO", "XTB", "Portu", "Fondee", "Fio e-Broker", "Interactive Brokers", "eToro",
         "Trading 212", "Binance", "Coinbase"),
        ("nakup akcii", "investicni fond", "pravidelna investice", "nakup etf",
         "kryptomeny nakup", "dluhopisy nakup"),
    ),
    "cat_housing": (
        ("Hornbach", "OBI", "Bauhaus", "Uni Hobby", "Mountfield", "Stavebniny DEK"),
        ("najem byt", "najemne mesicni", "fond oprav svj", "sluzby spojene s bydlenim",
         "instalater oprava", "malir pokoje"),
    ),
}

_PHRASES_ONLY: dict[str, tuple[str, ...]] = {
    "cat_income": (
        "MZDA", "Vyplata mzdy", "PLAT", "Mzdovy prevod", "PRIPSANI MZDY", "Pravidelna mzda",
        "VYPLATA", "STRAVENKY", "Stravenkovy pausal", "BENEFITY", "Prispevek zamestnavatele",
        "CSSZ", "Duchod", "DUCHOD", "Socialni davky", "Rodicovsky prispevek", "MPSV",
        "URAD PRACE", "Dosla platba", "DIVIDENDA", "Vynos z investic", "UROK", "Pripsany urok",
        "FAKTURA", "Platba za fakturu", "Prijata faktura", "VRATKA", "Vraceni penez",
        "REFUNDACE", "Dobropis",
    ),
    "cat_taxes": (
        "Financni urad", "FINANCNI URAD PRAHA", "Dan z prijmu", "DAN Z NEMOVITOSTI",
        "Dan silnicni", "DPFO doplatek", "DPPH zaloha", "DPH priznani", "Platba dane",
        "Financni urad pro hlavni mesto Prahu", "Danove priznani doplatek", "Zaloha na dan",
        "Socialni pojisteni OSVC", "Zdravotni pojisteni OSVC", "VZP pojistne OSVC",
        "CSSZ zaloha OSVC", "Poplatek za odpad", "Poplatek za psa", "Mestsky urad poplatek",
        "Kolek spravni poplatek",
    ),
    "cat_internal_transfers": (
        "Vlastni ucet", "Prevod na vlastni ucet", "Prevod mezi ucty", "Vyber z bankomatu",
        "ATM vyber hotovosti", "Vklad hotovosti", "Sporeni mesicni", "Prevod na sporici ucet",
        "Stavebni sporeni", "Penzijni sporeni", "Prevod z bezneho uctu", "Vyber hotovosti ATM",
        "Sporici ucet vklad", "Prevod na termin vklad", "Presun mezi ucty",
        "Revolut top up", "Wise prevod", "Prevod na Revolut", "Dobiti Revolut", "N26 prevod",
    ),
}

_TRANSFER_STYLE = {"cat_utilities", "cat_housing", "cat_investments"}


def _expand(name: str, templates: Iterable[str]) -> list[str]:
    return [template.format(name=name, upper=name.upper()) for template in templates]


def generate_training_data() -> list[tuple[str, str]]:
    """Return (description, category_id) pairs for every built-in category."""
    samples: list[tuple[str, str]] = []

    for category_id, (merchants, phrases) in _MERCHANTS.items():
        templates = TRANSFER_TEMPLATES if category_id in _TRANSFER_STYLE else CARD_TEMPLATES
        for merchant in merchants:
            samples.extend((text, category_id) for text in _expand(merchant, templates))
        for phrase in phrases:
            samples.append((phrase, category_id))
            samples.append((f"{phrase} {merchants[0]}", category_id))

    for category_id, phrases in _PHRASES_ONLY.items():
        samples.extend((phrase, category_id) for phrase in phrases)

    return samples


def category_counts(samples: Iterable[tuple[str, str]]) -> list[tuple[str, int]]:
    """Samples per category, most frequent first."""
    counts = Counter(category_id for _, category_id in samples)
    return counts.most_common()
