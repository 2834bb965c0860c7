"""Services — FastAPI 앱과 동기화 엔진."""
