import asyncio

from sqlalchemy import select

from medicare.database import async_session
from medicare.models.worker import Worker
from medicare.schemas.worker import WorkerCreate
from medicare.services.worker_service import worker_service


def _data(name):
    return WorkerCreate(full_name=name, age=30, gender="female")


def test_identifier_collision_keeps_earlier_work_in_session(client):
    async def scenario():
        async with async_session() as db:
            first = await worker_service.register(db, _data("Maria Santos"), created_by=None)
            # Row that already owns the next number in the sequence
            db.add(Worker(worker_id="WKR-000002", full_name="Imported Record", age=44, gender="male"))
            await db.flush()

            second = await worker_service.register(db, _data("Aisha Khan"), created_by=None)
            await db.commit()
            ids = (first.worker_id, second.worker_id)

        async with async_session() as db:
            stored = (await db.execute(select(Worker.worker_id).order_by(Worker.worker_id))).scalars().all()
        return ids, stored

    (first_id, second_id), stored = asyncio.run(scenario())

    assert first_id == "WKR-000001"
    assert second_id == "WKR-000003"
    assert stored == ["WKR-000001", "WKR-000002", "WKR-000003"]


def test_bulk_registration_in_one_session_issues_consecutive_ids(client):
    async def scenario():
        async with async_session() as db:
            workers = [
                await worker_service.register(db, _data(f"Worker {n}"), created_by=None)
                for n in range(3)
            ]
            await db.commit()
            return [w.worker_id for w in workers]

    assert asyncio.run(scenario()) == ["WKR-000001", "WKR-000002", "WKR-000003"]
