# tests/domains/__init__.py

"""
도메인별 테스트 모듈 패키지입니다.

- `test_usr_n.py`: 인증과 사용자 관리
- `test_ptn_n.py`: 공급업체/고객
- `test_inv_n.py`, `test_stock_n.py`: 자재, 제품, BOM과 재고 일관성 엔진
- `test_pur_n.py`, `test_prd_n.py`, `test_sal_n.py`: 발주, 작업지시, 판매 주문 흐름
"""
