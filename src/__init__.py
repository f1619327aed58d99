"""Picture-to-JSON document processing.

Turns scanned signup forms and PDFs into flat JSON records using OpenCV
preprocessing, Tesseract or Google Cloud Vision OCR, and rule-based field
extraction, with a correctable per-document processing lifecycle.
"""
