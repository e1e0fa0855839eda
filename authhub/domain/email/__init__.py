"""Email domain - tenant template rendering and delivery"""
