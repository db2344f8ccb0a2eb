# fims/domains/pur/__init__.py
