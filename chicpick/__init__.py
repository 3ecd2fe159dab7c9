"""Personal closet manager: wardrobe inventory, wear tracking and daily picks."""
