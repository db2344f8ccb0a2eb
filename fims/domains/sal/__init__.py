# fims/domains/sal/__init__.py
