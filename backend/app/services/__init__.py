# Services package init
"""
Careers Site Backend: Services Layer
======================================

Service Inventory:
    - UploadService:      resume type/size checks, temp storage, scoped cleanup
    - MailService:        SMTP verification and delivery of the notification
    - ApplicationService: upload → validate → send pipeline, returns an outcome
"""
