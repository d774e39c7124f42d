import os

db_url = os.environ.get("DB_URL", "sqlite://:memory:")
redis_url = os.environ.get("REDIS_URL", "redis://localhost:6379/0")

jwt_secret = os.environ.get("JWT_SECRET", "change-me")
jwt_algorithm = os.environ.get("JWT_ALGORITHM", "HS256")
jwt_expire_minutes = int(os.environ.get("JWT_EXPIRE_MINUTES", str(60 * 24 * 30)))

razorpay_key_id = os.environ.get("RAZORPAY_KEY_ID", "rzp_test_placeholder")
razorpay_key_secret = os.environ.get("RAZORPAY_KEY_SECRET", "placeholder_secret")
razorpay_base_url = os.environ.get("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1")

upload_dir = os.environ.get("UPLOAD_DIR", "uploads")
seed_db = os.environ.get("SEED_DB", "false").lower() == "true"
log_level = os.environ.get("LOG_LEVEL", "INFO")
cors_origins = [o for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o]
