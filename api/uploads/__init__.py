"""Product image uploads forwarded to the media host."""
