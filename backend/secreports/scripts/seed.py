# backend/secreports/scripts/seed.py
"""
Seed an empty database with the admin account and the governorates.

Both steps are idempotent: an existing admin username is left alone and
governorates are matched by code.

    SEED_ADMIN_PASSWORD=... python -m secreports.scripts.seed
"""

import os
from typing import Optional

from sqlalchemy.orm import Session

from secreports.database import SessionLocal
from secreports.security import get_password_hash
from secreports.apps.accounts.models import User, UserRole
from secreports.apps.governorates.models import Governorate

ADMIN_FULL_NAME = "مدير النظام"

GOVERNORATES = [
    {
        "name": "رام الله والبيرة",
        "code": "RAB",
        "regions": ["رام الله", "البيرة", "بيتونيا", "دير دبوان", "سلواد"],
        "address": "شارع الإرسال، رام الله",
        "phone": "02-2956478",
        "email": "ramallah@gov.ps",
    },
    {
        "name": "نابلس",
        "code": "NAB",
        "regions": ["نابلس", "بيتا", "حوارة", "سبسطية", "بيت فوريك", "عصيرة الشمالية"],
        "address": "وسط المدينة، نابلس",
        "phone": "09-2376541",
        "email": "nablus@gov.ps",
    },
    {
        "name": "الخليل",
        "code": "HEB",
        "regions": ["الخليل", "حلحول", "دورا", "يطا", "سعير", "بني نعيم"],
        "address": "وسط المدينة، الخليل",
        "phone": "02-2254789",
        "email": "hebron@gov.ps",
    },
    {
        "name": "بيت لحم",
        "code": "BET",
        "regions": ["بيت لحم", "بيت جالا", "بيت ساحور", "الخضر", "الدوحة"],
        "address": "شارع المهد، بيت لحم",
        "phone": "02-2746589",
        "email": "bethlehem@gov.ps",
    },
    {
        "name": "جنين",
        "code": "JEN",
        "regions": ["جنين", "قباطية", "يعبد", "عرابة", "ميثلون"],
        "address": "وسط المدينة، جنين",
        "phone": "04-2436987",
        "email": "jenin@gov.ps",
    },
    {
        "name": "طولكرم",
        "code": "TUL",
        "regions": ["طولكرم", "عنبتا", "بلعا", "دير الغصون", "قفين"],
        "address": "وسط المدينة، طولكرم",
        "phone": "09-2674851",
        "email": "tulkarm@gov.ps",
    },
    {
        "name": "قلقيلية",
        "code": "QAL",
        "regions": ["قلقيلية", "حبلة", "كفر ثلث", "عزون", "جيوس"],
        "address": "وسط المدينة، قلقيلية",
        "phone": "09-2945612",
        "email": "qalqilya@gov.ps",
    },
    {
        "name": "سلفيت",
        "code": "SAL",
        "regions": ["سلفيت", "بديا", "مردا", "كفر الديك", "دير بلوط"],
        "address": "وسط المدينة، سلفيت",
        "phone": "09-2519467",
        "email": "salfit@gov.ps",
    },
    {
        "name": "أريحا والأغوار",
        "code": "JER",
        "regions": ["أريحا", "العوجا", "الجفتلك", "مرج نعجة", "فصايل"],
        "address": "شارع القدس، أريحا",
        "phone": "02-2325698",
        "email": "jericho@gov.ps",
    },
    {
        "name": "طوباس",
        "code": "TUB",
        "regions": ["طوباس", "تياسير", "عقابا", "وادي الفارعة", "العقبة"],
        "address": "وسط المدينة، طوباس",
        "phone": "09-2573256",
        "email": "tubas@gov.ps",
    },
    {
        # JER is taken by Jericho; codes are unique.
        "name": "القدس",
        "code": "JRS",
        "regions": ["القدس الشرقية", "العيزرية", "أبو ديس", "الرام", "بير نبالا", "بدو", "قطنة"],
        "address": "الرام، القدس",
        "phone": "02-2347896",
        "email": "jerusalem@gov.ps",
    },
]


def ensure_admin(db: Session, username: str, password: Optional[str]) -> User:
    existing = db.query(User).filter(User.username == username).first()
    if existing:
        return existing

    if not password:
        raise SystemExit("SEED_ADMIN_PASSWORD must be set to create the admin account.")

    user = User(
        username=username,
        hashed_password=get_password_hash(password),
        full_name=ADMIN_FULL_NAME,
        role=UserRole.ADMIN,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def seed_governorates(db: Session) -> int:
    existing = {code for (code,) in db.query(Governorate.code).all()}
    created = 0
    for row in GOVERNORATES:
        if row["code"] in existing:
            continue
        db.add(Governorate(**row))
        created += 1
    db.commit()
    return created


def main() -> None:
    username = os.getenv("SEED_ADMIN_USERNAME", "admin")
    password = os.getenv("SEED_ADMIN_PASSWORD")

    db = SessionLocal()
    try:
        user = ensure_admin(db, username, password)
        created = seed_governorates(db)
        print("OK: admin =", user.username, "governorates created =", created)
    finally:
        db.close()


if __name__ == "__main__":
    main()
