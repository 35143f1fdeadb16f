import pytest
from httpx import ASGITransport, AsyncClient

from main import create_app
from services.patient_service import PatientService


@pytest.fixture
async def app():
    app = create_app("testing")
    database = app.state.database
    await database.connect()
    await database.create_tables()
    yield app
    await database.disconnect()


@pytest.fixture
async def session(app):
    async with app.state.database.session() as session:
        yield session


@pytest.fixture
def service(session):
    return PatientService(session)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_patient(service):
    async def _make(first_name, last_name, dob=None, phone=None, visit_dates=()):
        patient = await service.create_patient(first_name, last_name, dob, phone)
        for visit_date in visit_dates:
            await service.add_visit(
                patient.id,
                {
                    "date": visit_date,
                    "complaint": f"Complaint on {visit_date}",
                    "exam_findings": "",
                    "current_treatment": "",
                    "homeopathic_treatment": "",
                },
            )
        return patient

    return _make
