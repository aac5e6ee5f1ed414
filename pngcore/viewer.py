import matplotlib.pyplot as plt

from pngcore.pixels import DecodedImage


def show_image(image: DecodedImage, title: str = 'Decoded PNG'):
    plt.imshow(image.to_rgba8())
    plt.title(title)
    plt.axis('off')
    plt.show()
