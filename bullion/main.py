import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from bullion.core.config import config
from bullion.core.db import all_models  # noqa: F401  registers every table
from bullion.core.db.engine import check_database_connection
from bullion.core.error_handler import database_exception_handler, global_exception_handler
from bullion.core.response_interceptor import (
    SuccessResponseInterceptor,
    CustomAPIRoute,
)
from bullion.modules.parties.router import router as parties_router
from bullion.modules.stocks.router import router as stocks_router, karats_router
from bullion.modules.drafts.router import router as drafts_router
from bullion.modules.registry.router import router as registry_router
from bullion.modules.inventory.router import router as inventory_router
from bullion.modules.inventory_logs.router import router as inventory_logs_router
from bullion.modules.fund_transfers.router import router as fund_transfers_router

# Configure logging to output to console
logging.basicConfig(
    level=config.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)
logger.info("Starting Bullion Ledger API...")

app = FastAPI(
    title="Bullion Ledger API",
    description="Draft lifecycle, party balances, ledger and fund transfers for a bullion trading desk",
    version="1.0.0",
)

# Override the default route class to support skip_interceptor decorator
app.router.route_class = CustomAPIRoute

app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add Success Response Interceptor (must be added after CORS)
app.add_middleware(SuccessResponseInterceptor)

# Include routers with /api prefix
app.include_router(parties_router, prefix="/api")
app.include_router(stocks_router, prefix="/api")
app.include_router(karats_router, prefix="/api")
app.include_router(drafts_router, prefix="/api")
app.include_router(registry_router, prefix="/api")
app.include_router(inventory_router, prefix="/api")
app.include_router(inventory_logs_router, prefix="/api")
app.include_router(fund_transfers_router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "database": await check_database_connection()}
