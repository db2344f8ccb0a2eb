# fims/utils/__init__.py
