"""Infrastructure — 외부 API 클라이언트, Redis, 관측성."""
