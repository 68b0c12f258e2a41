"""Domain services: classification, detection, merging and orchestration."""
