"""Domain services: segmentation, evidence storage and lifecycle, progress, seeding."""
