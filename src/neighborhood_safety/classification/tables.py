"""
Neighborhood Safety - Built-in Classification Tables

Two incident schemes are supported:

- LEGACY: numeric LAPD-style crime codes (2020-present dataset), with a
  short keyword list as fallback for codes missing from the table.
- NIBRS: offense descriptions only; matched against NIBRS offense names.

Category assignment is best-effort and does not claim to follow the
official FBI/NIBRS taxonomy.
"""

from __future__ import annotations

from neighborhood_safety.classification.categories import CrimeCategory
from neighborhood_safety.classification.classifier import ClassificationTable

LEGACY_CODES: dict[CrimeCategory, tuple[str, ...]] = {
    CrimeCategory.VIOLENT: (
        "110",  # CRIMINAL HOMICIDE
        "113",  # MANSLAUGHTER, NEGLIGENT
        "121",  # RAPE, FORCIBLE
        "122",  # RAPE, ATTEMPTED
        "210",  # ROBBERY
        "220",  # ATTEMPTED ROBBERY
        "230",  # ASSAULT WITH DEADLY WEAPON, AGGRAVATED ASSAULT
        "231",  # ASSAULT WITH DEADLY WEAPON ON POLICE OFFICER
        "235",  # CHILD ABUSE (PHYSICAL) - AGGRAVATED ASSAULT
        "236",  # INTIMATE PARTNER - AGGRAVATED ASSAULT
        "250",  # SHOTS FIRED AT INHABITED DWELLING
        "251",  # SHOTS FIRED AT MOVING VEHICLE, TRAIN OR AIRCRAFT
        "623",  # BATTERY POLICE (SIMPLE)
        "624",  # BATTERY - SIMPLE ASSAULT
        "625",  # OTHER ASSAULT
        "626",  # INTIMATE PARTNER - SIMPLE ASSAULT
        "761",  # BRANDISH WEAPON
        "762",  # LEWD CONDUCT
        "763",  # CHILD ANNOYING (17YRS & UNDER)
        "812",  # CRM AGNST CHLD (13 OR UNDER) (14-15 & SUSP 10 YRS OLDER)
        "813",  # CHILD STEALING
        "815",  # SEXUAL PENETRATION W/FOREIGN OBJECT
        "820",  # ORAL COPULATION
        "821",  # SODOMY/SEXUAL CONTACT B/W PENIS OF ONE PERS TO ANUS OTH
        "822",  # HUMAN TRAFFICKING - COMMERCIAL SEX ACTS
        "830",  # CHILD ABUSE (PHYSICAL) - SIMPLE ASSAULT
        "845",  # SEX OFFENDER REGISTRANT OUT OF COMPLIANCE
        "860",  # BATTERY WITH SEXUAL CONTACT
        "865",  # BATTERY WITH SEXUAL CONTACT
        "866",  # LETTERS, LEWD - TELEPHONE CALLS, LEWD
        "870",  # KIDNAPPING
        "880",  # AGGRAVATED ASSAULT
    ),
    CrimeCategory.CAR_THEFT: (
        "510",  # VEHICLE - STOLEN
        "520",  # VEHICLE - ATTEMPT STOLEN
    ),
    CrimeCategory.BREAK_IN: (
        "310",  # BURGLARY
        "320",  # BURGLARY, ATTEMPTED
        "330",  # BURGLARY FROM VEHICLE
        "410",  # BURGLARY FROM VEHICLE, ATTEMPTED
        "420",  # THEFT FROM MOTOR VEHICLE - PETTY ($950 & UNDER)
        "421",  # THEFT FROM MOTOR VEHICLE - ATTEMPT
    ),
    CrimeCategory.PETTY_THEFT: (
        "331",  # THEFT FROM MOTOR VEHICLE - GRAND ($950.01 AND OVER)
        "341",  # THEFT-GRAND ($950.01 & OVER)EXCPT,GUNS,FOWL,LIVESTK,PROD
        "343",  # SHOPLIFTING-GRAND THEFT ($950.01 & OVER)
        "345",  # DISHONEST EMPLOYEE - GRAND THEFT
        "347",  # GRAND THEFT / INSURANCE FRAUD
        "349",  # GRAND THEFT / AUTO REPAIR
        "350",  # THEFT, PERSON
        "351",  # PURSE SNATCHING
        "352",  # PICKPOCKET
        "353",  # DRUNK ROLL
        "354",  # THEFT OF IDENTITY
        "440",  # THEFT PLAIN - PETTY ($950 & UNDER)
        "441",  # THEFT PLAIN - ATTEMPT
        "442",  # SHOPLIFTING - PETTY THEFT ($950 & UNDER)
        "443",  # SHOPLIFTING - ATTEMPT
        "444",  # DISHONEST EMPLOYEE - PETTY THEFT
        "445",  # DISHONEST EMPLOYEE ATTEMPTED THEFT
        "450",  # THEFT FROM PERSON - ATTEMPT
        "451",  # PURSE SNATCHING - ATTEMPT
        "470",  # TILL TAP - GRAND THEFT ($950.01 & OVER)
        "471",  # TILL TAP - PETTY ($950 & UNDER)
        "473",  # THEFT, COIN MACHINE - GRAND ($950.01 & OVER)
        "474",  # THEFT, COIN MACHINE - PETTY ($950 & UNDER)
        "475",  # THEFT, COIN MACHINE - ATTEMPT
        "480",  # BIKE - STOLEN
        "485",  # BIKE - ATTEMPTED STOLEN
        "487",  # BOAT - STOLEN
        "740",  # VANDALISM - FELONY ($400 & OVER, ALL CHURCH VANDALISMS)
        "745",  # VANDALISM - MISDEMEANOR ($399 OR UNDER)
    ),
}

LEGACY_KEYWORDS: dict[CrimeCategory, tuple[str, ...]] = {
    CrimeCategory.VIOLENT: (
        "assault",
        "battery",
        "robbery",
        "rape",
        "homicide",
        "murder",
        "manslaughter",
        "kidnap",
        "shots fired",
    ),
    CrimeCategory.CAR_THEFT: (
        "vehicle - stolen",
        "vehicle, stolen",
        "vehicle - attempt stolen",
        "stolen vehicle",
        "motor vehicle theft",
    ),
    CrimeCategory.BREAK_IN: (
        "burglary",
        "breaking",
    ),
    CrimeCategory.PETTY_THEFT: (
        "theft",
        "larceny",
        "shoplift",
        "pickpocket",
        "purse snatch",
        "till tap",
        "embezzle",
    ),
}

NIBRS_KEYWORDS: dict[CrimeCategory, tuple[str, ...]] = {
    CrimeCategory.VIOLENT: (
        "Murder and Nonnegligent Manslaughter",
        "Negligent Manslaughter",
        "Justifiable Homicide",
        "Rape",
        "Sodomy",
        "Sexual Assault With An Object",
        "Fondling",
        "Aggravated Assault",
        "Simple Assault",
        "Intimidation",
        "Kidnapping/Abduction",
        "Robbery",
        "Human Trafficking, Commercial Sex Acts",
        "Human Trafficking, Involuntary Servitude",
        "Assault Offenses",
        "Sex Offenses",
    ),
    CrimeCategory.CAR_THEFT: (
        "Motor Vehicle Theft",
        "Theft of Motor Vehicle Parts or Accessories",
    ),
    CrimeCategory.BREAK_IN: (
        "Burglary/Breaking & Entering",
        "Trespass of Real Property",
    ),
    CrimeCategory.PETTY_THEFT: (
        "Larceny/Theft Offenses",
        "Pocket-picking",
        "Purse-snatching",
        "Shoplifting",
        "Theft from Building",
        "Theft from Coin-Operated Machine or Device",
        "Theft from Motor Vehicle",
        "All Other Larceny",
        "Pickpocket",
        "Fraud Offenses",
        "Identity Theft",
        "Impersonation",
        "False Pretenses/Swindle/Confidence Game",
        "Credit Card/Automated Teller Machine Fraud",
        "Embezzlement",
        "Stolen Property Offenses",
        "Counterfeiting/Forgery",
        "Vandalism",
        "Destruction/Damage/Vandalism of Property",
    ),
}


def legacy_table(code_width: int = 3) -> ClassificationTable:
    return ClassificationTable.build(
        "legacy", codes=LEGACY_CODES, keywords=LEGACY_KEYWORDS, code_width=code_width
    )


def nibrs_table(code_width: int = 3) -> ClassificationTable:
    return ClassificationTable.build("nibrs", keywords=NIBRS_KEYWORDS, code_width=code_width)


LEGACY_TABLE = legacy_table()
NIBRS_TABLE = nibrs_table()
