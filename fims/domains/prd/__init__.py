# fims/domains/prd/__init__.py
