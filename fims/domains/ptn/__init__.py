# fims/domains/ptn/__init__.py
