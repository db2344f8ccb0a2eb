# fims/domains/__init__.py

"""
비즈니스 도메인 서브패키지 모음입니다.

- usr: 사용자 및 인증
- ptn: 거래처 (공급업체, 고객)
- inv: 자재, 제품, BOM, 재고 수불
- pur: 구매 발주 (Purchase Order)
- prd: 생산 작업지시 (Work Order)
- sal: 판매 주문 (Sales Order)
"""
