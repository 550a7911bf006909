from pageshaper.addressing.address import AddressStep, StructuralAddress

__all__ = ["AddressStep", "StructuralAddress"]
