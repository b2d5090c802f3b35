"""GearGuard 정비 관리 API 서버 패키지.

GearGuard maintenance management (CMMS) API server package.
"""
