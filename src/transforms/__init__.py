"""Row-level transcript transforms: cell id decoding and filtering."""
