# fims/domains/usr/__init__.py
