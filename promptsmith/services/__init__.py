"""Service layer: prompt enhancement and vagueness classification."""
