# fims/domains/dsh/__init__.py
