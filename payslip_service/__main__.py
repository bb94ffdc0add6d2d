import uvicorn

from payslip_service.core.config import settings
from payslip_service.core.logging_config import configure_logging


def run() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run("payslip_service.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
