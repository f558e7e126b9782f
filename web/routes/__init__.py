"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- assets: 자산 생성/조회/수정/삭제, 재계산
- records: 자산 기록 추가/조회/수정/삭제
- exchange: 환율 조회, USD 환산
- reimbursements: 경비 청구 제출/조회, 심사 (관리자)
- payouts: 지급 배치 생성 (관리자)
"""
