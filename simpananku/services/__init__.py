"""
Services: hosted backend client, secure storage and deep links
"""
