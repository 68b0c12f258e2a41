"""Cost table adapters implementing `CostTablePort`."""
