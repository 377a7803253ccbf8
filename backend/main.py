# ------------------------------ IMPORTS ------------------------------
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging

from core.database import init_db, SessionLocal
from core.config.settings import settings
from core.exceptions import register_exception_handlers
from core.services.email_service import email_service
from core.services.subscription_sweeper import SubscriptionSweeper
from accounts.routes import auth_router, router as account_router
from accounts.service import AccountService
from admin.routes import router as admin_router
from cart.routes import router as cart_router
from catalog.routes import router as listings_router, private_router
from dealers.routes import router as dealers_router
from messages.routes import router as messages_router, quotes_router
from subscriptions.routes import router as subscriptions_router

# ------------------------------ SETUP ------------------------------
load_dotenv()
logger = logging.getLogger("fcf_motors")

sweeper = SubscriptionSweeper()

def bootstrap_admin() -> None:
    """Make sure the configured admin account exists."""
    if not settings.security.bootstrap_admin:
        return
    db = SessionLocal()
    try:
        AccountService(db, email_service).ensure_admin(
            settings.security.admin_username,
            settings.security.admin_email,
            settings.security.admin_password,
        )
    finally:
        db.close()

# ------------------------------ LIFESPAN ------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    try:
        logger.info("Initializing database...")
        init_db()
        bootstrap_admin()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    if settings.subscriptions.sweep_enabled:
        sweeper.start()
    yield
    await sweeper.stop()

# ------------------------------ APP ------------------------------
app = FastAPI(
    title="FCF Motors API",
    description="Backend API for the FCF Motors vehicle marketplace",
    version="1.0.0",
    lifespan=lifespan,
)

# ------------------------------ CORS ------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.get_origins_list(),
    allow_credentials=settings.cors.credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ------------------------------ ROUTERS ------------------------------
app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(account_router, prefix="/api/account", tags=["Account"])
app.include_router(listings_router, prefix="/api/listings", tags=["Listings"])
app.include_router(private_router, prefix="/api/private", tags=["Private sellers"])
app.include_router(dealers_router, prefix="/api/dealers", tags=["Dealers"])
app.include_router(cart_router, prefix="/api/cart", tags=["Cart"])
app.include_router(messages_router, prefix="/api/messages", tags=["Messages"])
app.include_router(quotes_router, prefix="/api/quotes", tags=["Quotes"])
app.include_router(subscriptions_router, prefix="/api/subscriptions", tags=["Subscriptions"])
app.include_router(admin_router, prefix="/api/admin", tags=["Admin"])

# ------------------------------ HEALTH ENDPOINTS ------------------------------
@app.get("/", tags=["Health"])
async def root():
    return {"message": "FCF Motors API", "status": "running"}

@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy", "sweeper": sweeper.running}

# ------------------------------ MAIN ------------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.api.host, port=settings.api.port, reload=settings.api.debug)

# ------------------------------ END OF FILE ------------------------------
