"""
Scan a worker QR code at a workstation and print the worker's record.
Run with: python -m scripts.scan_camera                  (live webcam)
Run with: python -m scripts.scan_camera --image card.png (photo or screenshot)
Run with: python -m scripts.scan_camera --manual WKR-000001
"""

import argparse
import asyncio
import logging
import sys
import threading
from medicare.database import engine, async_session
from medicare.exceptions import MedicareError
from medicare.logging_config import setup_logging
from medicare.scanner import CameraSessionManager
from medicare.services.visit_service import visit_service
from medicare.services.worker_service import worker_service

logger = logging.getLogger("medicare.scripts.scan_camera")


def read_identifier(args) -> str:
    with CameraSessionManager() as scanner:
        if args.manual:
            return scanner.submit_manual(args.manual)
        if args.image:
            return scanner.scan_still_image(args.image)

        scanned = {}
        done = threading.Event()

        def on_scan(worker_id: str):
            scanned["worker_id"] = worker_id
            done.set()

        device = scanner.start(on_scan)
        print(f"Scanning with {device.label}... hold the QR code up to the camera (Ctrl+C to cancel)")
        if not done.wait(timeout=args.timeout):
            raise MedicareError(f"No QR code read within {args.timeout:.0f}s")
        return scanned["worker_id"]


async def show_worker(worker_id: str):
    async with async_session() as db:
        worker = await worker_service.get_by_worker_id(db, worker_id)
        visits = await visit_service.history(db, worker)

    print(f"\n{worker.full_name}  [{worker.worker_id}]")
    print(f"  Age: {worker.age}   Gender: {worker.gender}   Registered: {worker.created_at:%Y-%m-%d}")
    print(f"  Visits: {len(visits)}")
    for visit in visits:
        print(f"\n  {visit.visit_date}  {visit.diagnosis}  (Dr. {visit.doctor_name})")
        print(f"    Symptoms: {visit.symptoms}")
        if visit.notes:
            print(f"    Notes: {visit.notes}")
    await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Scan a worker QR code")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--image", help="Decode a QR code from an image file instead of the camera")
    source.add_argument("--manual", help="Look up a typed worker ID")
    parser.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait for a live scan")
    args = parser.parse_args()
    setup_logging()

    try:
        worker_id = read_identifier(args)
        asyncio.run(show_worker(worker_id))
    except MedicareError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
