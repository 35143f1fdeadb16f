"""
Seed the database with sample patients and visits

    python -m database.seed
"""

import asyncio
import logging

from config import get_config
from database.connection import Database
from services.patient_service import PatientService
from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)

SAMPLE_PATIENTS = [
    {
        "first_name": "John",
        "last_name": "Perez",
        "date_of_birth": "1980-05-15",
        "phone": "555-1234",
        "visits": [
            {
                "date": "2023-10-01",
                "complaint": "Seasonal flu",
                "exam_findings": "Nasal congestion, mild cough.",
                "current_treatment": "Rest and fluids.",
                "homeopathic_treatment": "Oscillococcinum.",
            },
            {
                "date": "2024-03-15",
                "complaint": "Spring allergy",
                "exam_findings": "Watery eyes, frequent sneezing.",
                "current_treatment": "Loratadine 10mg daily.",
                "homeopathic_treatment": "Allium Cepa 30C.",
            },
        ],
    },
    {
        "first_name": "Maria",
        "last_name": "Garcia",
        "date_of_birth": "1992-09-20",
        "phone": "555-5678",
        "visits": [
            {
                "date": "2024-01-20",
                "complaint": "Back pain",
                "exam_findings": "Limited movement in the lumbar area.",
                "current_treatment": "Ibuprofen 400mg, physiotherapy.",
                "homeopathic_treatment": "Arnica Montana 200C.",
            },
        ],
    },
]


async def seed(database: Database) -> None:
    await database.create_tables()
    async with database.session() as session:
        service = PatientService(session)
        for sample in SAMPLE_PATIENTS:
            patient = await service.create_patient(
                sample["first_name"],
                sample["last_name"],
                sample["date_of_birth"],
                sample["phone"],
            )
            for visit in sample["visits"]:
                await service.add_visit(patient.id, visit)
            logger.info("Seeded patient %s (%s)", patient.id, patient.name)


async def main():
    config = get_config()
    configure_logging(config)
    database = Database(config.DATABASE_URL, echo=config.SQL_ECHO)
    await database.connect()
    try:
        logger.info("Start seeding ...")
        await seed(database)
        logger.info("Seeding finished.")
    finally:
        await database.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
