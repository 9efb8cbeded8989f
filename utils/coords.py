def pixel_to_complex(px, py, min_x, max_x, min_y, max_y, image_width,
                     image_height):
    fx = min_x + (px / image_width) * (max_x - min_x)
    fy = min_y + (py / image_height) * (max_y - min_y)
    return fx, fy


def complex_to_pixel(fx, fy, min_x, max_x, min_y, max_y, image_width,
                     image_height):
    px = int((fx - min_x) / (max_x - min_x) * image_width)
    py = int((fy - min_y) / (max_y - min_y) * image_height)
    return px, py


def index_to_pixel(index, image_width):
    return index % image_width, index // image_width
