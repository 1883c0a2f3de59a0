"""Instance registry, topology planning and deployment orchestration."""
