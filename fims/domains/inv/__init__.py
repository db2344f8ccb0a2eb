# fims/domains/inv/__init__.py
